"""Wallet utility functions."""

import base58
import base64
import nacl.utils
import nacl.bindings

from typing import Tuple

from .error import WalletError
from .key_type import KeyType, KeyTypes


def random_seed() -> bytes:
    """
    Generate a random seed value.

    Returns:
        A new random seed

    """
    return nacl.utils.random(nacl.bindings.crypto_box_SEEDBYTES)


def pad(val: str) -> str:
    """Pad base64 values if need be: JWT calls to omit trailing padding."""
    padlen = 4 - len(val) % 4
    return val if padlen > 2 else (val + "=" * padlen)


def unpad(val: str) -> str:
    """Remove padding from base64 values if need be."""
    return val.rstrip("=")


def b64_to_bytes(val: str, urlsafe=False) -> bytes:
    """Convert a base 64 string to bytes."""
    if urlsafe:
        return base64.urlsafe_b64decode(pad(val))
    return base64.b64decode(pad(val))


def bytes_to_b64(val: bytes, urlsafe=False, pad=True, encoding: str = "ascii") -> str:
    """Convert a byte string to base 64."""
    b64 = (
        base64.urlsafe_b64encode(val).decode(encoding)
        if urlsafe
        else base64.b64encode(val).decode(encoding)
    )
    return b64 if pad else unpad(b64)


def b58_to_bytes(val: str) -> bytes:
    """Convert a base 58 string to bytes."""
    return base58.b58decode(val)


def bytes_to_b58(val: bytes) -> str:
    """Convert a byte string to base 58."""
    return base58.b58encode(val).decode("ascii")


def multi_base_encode(buffer: bytes) -> str:
    """Encode bytes as multibase base58btc."""
    return f"z{bytes_to_b58(buffer)}"


def multi_base_decode(encoded: str) -> bytes:
    """Decode a multibase base58btc string."""
    if not encoded or encoded[0] != "z":
        raise WalletError(f"Unsupported multibase encoding: {encoded}")
    return b58_to_bytes(encoded[1:])


def public_key_to_address(key_type: KeyType, public_key: bytes) -> str:
    """Derive the wallet address naming a public key."""
    return multi_base_encode(key_type.multicodec_prefix + public_key)


def address_to_public_key(
    address: str, key_types: KeyTypes = None
) -> Tuple[KeyType, bytes]:
    """Split an address into its (software) key type and raw public key.

    Raises:
        WalletError: If the address is malformed or the key type is unknown

    """
    try:
        prefixed = multi_base_decode(address)
    except ValueError as err:
        raise WalletError(f"Malformed address: {address}") from err
    key_type = (key_types or KeyTypes()).from_prefixed_bytes(prefixed)
    if not key_type:
        raise WalletError(f"Unknown key type for address: {address}")
    return key_type, prefixed[len(key_type.multicodec_prefix) :]
