"""Cryptography functions used by the software keystores."""

import hashlib

from typing import Tuple

import nacl.bindings
import nacl.exceptions
import nacl.pwhash
import nacl.secret
import nacl.utils

from ecdsa import (
    BadSignatureError,
    MalformedPointError,
    SECP256k1,
    SigningKey,
    VerifyingKey,
)
from ecdsa.util import sigdecode_string, sigencode_string

from .error import WalletError
from .key_type import ED25519, SECP256K1, KeyType
from .util import random_seed

KDF_SALT_BYTES = nacl.pwhash.argon2i.SALTBYTES
KDF_OPSLIMIT = nacl.pwhash.argon2i.OPSLIMIT_INTERACTIVE
KDF_MEMLIMIT = nacl.pwhash.argon2i.MEMLIMIT_INTERACTIVE


def create_keypair(key_type: KeyType, seed: bytes = None) -> Tuple[bytes, bytes]:
    """
    Create a public and private keypair from a seed value.

    Args:
        key_type: The type of key to generate
        seed: Seed for keypair

    Raises:
        WalletError: If the key type is not supported

    Returns:
        A tuple of (public key, secret key)

    """
    if key_type == ED25519:
        return create_ed25519_keypair(seed)
    elif key_type == SECP256K1:
        return create_secp256k1_keypair(seed)
    else:
        raise WalletError(f"Unsupported key type: {key_type.key_type}")


def create_ed25519_keypair(seed: bytes = None) -> Tuple[bytes, bytes]:
    """
    Create a public and private ed25519 keypair from a seed value.

    Args:
        seed: Seed for keypair

    Returns:
        A tuple of (public key, secret key)

    """
    if not seed:
        seed = random_seed()
    pk, sk = nacl.bindings.crypto_sign_seed_keypair(seed)
    return pk, sk


def create_secp256k1_keypair(seed: bytes = None) -> Tuple[bytes, bytes]:
    """
    Create a public and private secp256k1 keypair.

    The public key is returned in compressed SEC1 form.
    """
    if seed:
        try:
            sk = SigningKey.from_string(seed, curve=SECP256k1)
        except MalformedPointError as err:
            raise WalletError("Invalid secp256k1 seed") from err
    else:
        sk = SigningKey.generate(curve=SECP256k1)
    return sk.get_verifying_key().to_string("compressed"), sk.to_string()


def public_key_from_secret(key_type: KeyType, secret: bytes) -> bytes:
    """Recover the public key belonging to a private key."""
    if key_type == ED25519:
        if len(secret) != nacl.bindings.crypto_sign_SECRETKEYBYTES:
            raise WalletError("Invalid ed25519 private key length")
        return secret[nacl.bindings.crypto_sign_SEEDBYTES :]
    elif key_type == SECP256K1:
        return create_secp256k1_keypair(secret)[0]
    else:
        raise WalletError(f"Unsupported key type: {key_type.key_type}")


def sign_message(message: bytes, secret: bytes, key_type: KeyType) -> bytes:
    """
    Sign a message using a private signing key.

    Args:
        message: The message to sign
        secret: The private signing key
        key_type: The key type to derive the signature algorithm from

    Returns:
        bytes: The signature

    """
    if key_type == ED25519:
        result = nacl.bindings.crypto_sign(message, secret)
        return result[: nacl.bindings.crypto_sign_BYTES]
    elif key_type == SECP256K1:
        sk = SigningKey.from_string(secret, curve=SECP256k1)
        return sk.sign_deterministic(
            message, hashfunc=hashlib.sha256, sigencode=sigencode_string
        )
    else:
        raise WalletError(f"Unsupported key type: {key_type.key_type}")


def verify_signed_message(
    message: bytes, signature: bytes, verkey: bytes, key_type: KeyType
) -> bool:
    """
    Verify a signed message according to a public verification key.

    Returns:
        True if verified, else False

    """
    if key_type == ED25519:
        try:
            nacl.bindings.crypto_sign_open(signature + message, verkey)
        except nacl.exceptions.BadSignatureError:
            return False
        return True
    elif key_type == SECP256K1:
        vk = VerifyingKey.from_string(verkey, curve=SECP256k1)
        try:
            return vk.verify(
                signature, message, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
            )
        except BadSignatureError:
            return False
    else:
        raise WalletError(f"Unsupported key type: {key_type.key_type}")


def random_salt() -> bytes:
    """Generate a salt for passphrase key derivation."""
    return nacl.utils.random(KDF_SALT_BYTES)


def derive_key(
    passphrase: str,
    salt: bytes,
    opslimit: int = KDF_OPSLIMIT,
    memlimit: int = KDF_MEMLIMIT,
) -> bytes:
    """Derive a symmetric key from a passphrase with argon2i."""
    return nacl.pwhash.argon2i.kdf(
        nacl.secret.SecretBox.KEY_SIZE,
        passphrase.encode("utf-8"),
        salt,
        opslimit=opslimit,
        memlimit=memlimit,
    )


def seal(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt and authenticate a value under a symmetric key."""
    return bytes(nacl.secret.SecretBox(key).encrypt(plaintext))


def unseal(key: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt a value sealed with `seal`.

    Raises:
        WalletError: If the key does not open the value

    """
    try:
        return nacl.secret.SecretBox(key).decrypt(ciphertext)
    except nacl.exceptions.CryptoError as err:
        raise WalletError("Unable to decrypt key material") from err
