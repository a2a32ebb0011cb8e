"""Key type code."""

from typing import Optional


class KeyType:
    """Key Type class."""

    def __init__(
        self,
        key_type: str,
        multicodec_name: str,
        multicodec_prefix: bytes,
        hardware: bool = False,
    ):
        """Construct key type."""
        self._type: str = key_type
        self._name: str = multicodec_name
        self._prefix: bytes = multicodec_prefix
        self._hardware: bool = hardware

    @property
    def key_type(self) -> str:
        """Get Key type, type."""
        return self._type

    @property
    def multicodec_name(self) -> str:
        """Get key type multicodec name."""
        return self._name

    @property
    def multicodec_prefix(self) -> bytes:
        """Get key type multicodec prefix."""
        return self._prefix

    @property
    def hardware(self) -> bool:
        """Whether keys of this type must be held by a hardware signer."""
        return self._hardware

    def __repr__(self) -> str:
        """Human readable representation."""
        return f"<KeyType({self._type})>"


ED25519: KeyType = KeyType("ed25519", "ed25519-pub", b"\xed\x01")
SECP256K1: KeyType = KeyType("secp256k1", "secp256k1-pub", b"\xe7\x01")
# Ledger keys share the secp256k1 public key encoding, so addresses derived from
# them are indistinguishable from software secp256k1 addresses.
SECP256K1_LEDGER: KeyType = KeyType(
    "secp256k1-ledger", "secp256k1-pub", b"\xe7\x01", hardware=True
)


class KeyTypes:
    """Registry of the key types known to the wallet backends."""

    def __init__(self) -> None:
        """Construct key type registry."""
        self._type_registry: dict[str, KeyType] = {
            ED25519.key_type: ED25519,
            SECP256K1.key_type: SECP256K1,
            SECP256K1_LEDGER.key_type: SECP256K1_LEDGER,
        }
        self._prefix_registry: dict[bytes, KeyType] = {
            ED25519.multicodec_prefix: ED25519,
            SECP256K1.multicodec_prefix: SECP256K1,
        }

    def register(self, key_type: KeyType):
        """Register a new key type."""
        self._type_registry[key_type.key_type] = key_type
        if not key_type.hardware:
            self._prefix_registry[key_type.multicodec_prefix] = key_type

    def from_key_type(self, key_type: str) -> Optional[KeyType]:
        """Get KeyType instance from the key type identifier."""
        return self._type_registry.get(key_type)

    def from_prefixed_bytes(self, prefixed_bytes: bytes) -> Optional[KeyType]:
        """Get the software KeyType whose multicodec prefix starts the bytes."""
        return next(
            (
                key_type
                for prefix, key_type in self._prefix_registry.items()
                if prefixed_bytes.startswith(prefix)
            ),
            None,
        )

    @property
    def key_types(self) -> list[str]:
        """Identifiers of all registered key types."""
        return list(self._type_registry)
