from unittest import TestCase

from ..key_type import ED25519, SECP256K1, SECP256K1_LEDGER, KeyType, KeyTypes


class TestKeyType(TestCase):
    def test_from_key_type(self):
        key_types = KeyTypes()
        assert key_types.from_key_type("ed25519") is ED25519
        assert key_types.from_key_type("secp256k1") is SECP256K1
        assert key_types.from_key_type("secp256k1-ledger") is SECP256K1_LEDGER
        assert key_types.from_key_type("bls12381g2") is None
        assert set(key_types.key_types) == {
            "ed25519",
            "secp256k1",
            "secp256k1-ledger",
        }

    def test_from_prefixed_bytes(self):
        key_types = KeyTypes()
        assert key_types.from_prefixed_bytes(b"\xed\x01" + b"1" * 32) is ED25519
        # hardware keys share the software prefix
        assert key_types.from_prefixed_bytes(b"\xe7\x01" + b"1" * 33) is SECP256K1
        assert key_types.from_prefixed_bytes(b"\x00\x01") is None

    def test_register(self):
        key_types = KeyTypes()
        x25519 = KeyType("x25519", "x25519-pub", b"\xec\x01")
        key_types.register(x25519)
        assert key_types.from_key_type("x25519") is x25519
        assert key_types.from_prefixed_bytes(b"\xec\x01abc") is x25519

    def test_properties(self):
        assert ED25519.multicodec_name == "ed25519-pub"
        assert ED25519.multicodec_prefix == b"\xed\x01"
        assert not ED25519.hardware
        assert SECP256K1_LEDGER.hardware
        assert "secp256k1-ledger" in repr(SECP256K1_LEDGER)
