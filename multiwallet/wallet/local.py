"""Passphrase protected software keystore implementation of the wallet backend."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from .base import BaseKeystoreWallet
from .crypto import (
    KDF_MEMLIMIT,
    KDF_OPSLIMIT,
    create_keypair,
    derive_key,
    public_key_from_secret,
    random_salt,
    seal,
    sign_message,
    unseal,
)
from .error import (
    KeyNotFoundError,
    UnsupportedOperationError,
    WalletDuplicateError,
    WalletError,
    WalletLockedError,
)
from .key_info import KeyInfo, MsgMeta, Signature
from .key_type import ED25519, SECP256K1, KeyType, KeyTypes
from .keystore import KeyStore
from .util import b64_to_bytes, bytes_to_b64, public_key_to_address

LOGGER = logging.getLogger(__name__)

META_RECORD = "_keystore"
CHECK_VALUE = b"multiwallet-keystore-check"


class LocalWallet(BaseKeystoreWallet):
    """Software keystore sealing private keys under a shared passphrase."""

    KEY_TYPES = (ED25519, SECP256K1)

    def __init__(
        self,
        keystore: KeyStore,
        *,
        key_types: KeyTypes = None,
        kdf_opslimit: int = KDF_OPSLIMIT,
        kdf_memlimit: int = KDF_MEMLIMIT,
    ):
        """
        Initialize a `LocalWallet` instance.

        Args:
            keystore: The record store holding key material
            key_types: Registry used to resolve stored key type identifiers
            kdf_opslimit: argon2i operations limit for passphrase derivation
            kdf_memlimit: argon2i memory limit for passphrase derivation

        """
        self.keystore = keystore
        self._key_types = key_types or KeyTypes()
        self._kdf_limits = (kdf_opslimit, kdf_memlimit)
        self._unlocked_key: Optional[bytes] = None
        self._lock = asyncio.Lock()

    async def open(self, passphrase: str = None):
        """Prepare the keystore for use.

        An encrypted keystore is unlocked with the passphrase; an unencrypted
        one is encrypted under it.
        """
        if not passphrase:
            return
        if await self._encrypted():
            await self.unlock(passphrase)
        else:
            await self.change_passphrase(passphrase)

    async def _meta(self) -> dict:
        return await self.keystore.get(META_RECORD) or {}

    async def _encrypted(self) -> bool:
        return bool((await self._meta()).get("check"))

    async def _derive(self, meta: dict, passphrase: str) -> bytes:
        """Derive the keystore key and verify it against the check value."""
        if not passphrase:
            raise WalletLockedError("Passphrase required")
        loop = asyncio.get_event_loop()
        key = await loop.run_in_executor(
            None,
            derive_key,
            passphrase,
            b64_to_bytes(meta["salt"]),
            *self._kdf_limits,
        )
        try:
            check = unseal(key, b64_to_bytes(meta["check"]))
        except WalletError as err:
            raise WalletLockedError("Incorrect passphrase") from err
        if check != CHECK_VALUE:
            raise WalletLockedError("Incorrect passphrase")
        return key

    async def _active_key(self) -> Optional[bytes]:
        """Key sealing the records, None when the keystore is unencrypted."""
        if not await self._encrypted():
            return None
        if self._unlocked_key is None:
            raise WalletLockedError("Wallet is locked")
        return self._unlocked_key

    async def _passphrase_key(self, passphrase: str) -> Optional[bytes]:
        """Key for an explicit passphrase, None when the keystore is unencrypted."""
        meta = await self._meta()
        if not meta.get("check"):
            return None
        return await self._derive(meta, passphrase)

    def _key_type(self, record: dict) -> KeyType:
        key_type = self._key_types.from_key_type(record["key_type"])
        if not key_type:
            raise WalletError(f"Unknown key type in keystore: {record['key_type']}")
        return key_type

    def _record(
        self, address: str, key_type: KeyType, secret: bytes, key: Optional[bytes]
    ) -> dict:
        return {
            "address": address,
            "key_type": key_type.key_type,
            "private_key": bytes_to_b64(seal(key, secret) if key else secret),
            "sealed": bool(key),
        }

    def _secret(self, record: dict, key: Optional[bytes]) -> bytes:
        value = b64_to_bytes(record["private_key"])
        if not record.get("sealed"):
            return value
        if key is None:
            raise WalletLockedError("Wallet is locked")
        return unseal(key, value)

    async def _get(self, address: str) -> Optional[dict]:
        if not address or address.startswith("_"):
            return None
        return await self.keystore.get(address)

    async def _require(self, address: str) -> dict:
        record = await self._get(address)
        if not record:
            raise KeyNotFoundError(f"Key not found: {address}")
        return record

    def _check_type(self, key_type: KeyType):
        if key_type not in self.KEY_TYPES:
            raise UnsupportedOperationError(
                f"Local wallet does not support key type: {key_type.key_type}"
            )

    async def _store(self, key_type: KeyType, public_key: bytes, secret: bytes) -> str:
        key = await self._active_key()
        address = public_key_to_address(key_type, public_key)
        if await self._get(address):
            raise WalletDuplicateError(f"Key already present in wallet: {address}")
        await self.keystore.put(address, self._record(address, key_type, secret, key))
        return address

    async def new(self, key_type: KeyType) -> str:
        """Generate a software key and seal it in the keystore."""
        self._check_type(key_type)
        async with self._lock:
            public_key, secret = create_keypair(key_type)
            address = await self._store(key_type, public_key, secret)
        LOGGER.info("Created %s key %s", key_type.key_type, address)
        return address

    async def has(self, address: str) -> bool:
        """Check whether the keystore holds a key."""
        return await self._get(address) is not None

    async def list(self) -> Sequence[str]:
        """List the addresses held by the keystore."""
        return [name for name in await self.keystore.names() if not name.startswith("_")]

    async def sign(self, address: str, message: bytes, meta: MsgMeta) -> Signature:
        """Sign a message with an unlocked key."""
        async with self._lock:
            record = await self._require(address)
            key_type = self._key_type(record)
            secret = self._secret(record, await self._active_key())
        return Signature(key_type, sign_message(message, secret, key_type))

    async def sign_with_passphrase(
        self, address: str, message: bytes, passphrase: str
    ) -> Signature:
        """Sign a message, opening the key with an explicit passphrase."""
        async with self._lock:
            record = await self._require(address)
            key_type = self._key_type(record)
            secret = self._secret(record, await self._passphrase_key(passphrase))
        return Signature(key_type, sign_message(message, secret, key_type))

    async def export(self, address: str, passphrase: str) -> KeyInfo:
        """Export a private key after verifying the passphrase."""
        async with self._lock:
            record = await self._require(address)
            key = await self._passphrase_key(passphrase)
            return KeyInfo(self._key_type(record), self._secret(record, key))

    async def import_key(self, key_info: KeyInfo) -> str:
        """Seal externally supplied key material in the keystore."""
        self._check_type(key_info.key_type)
        public_key = public_key_from_secret(key_info.key_type, key_info.private_key)
        async with self._lock:
            address = await self._store(
                key_info.key_type, public_key, key_info.private_key
            )
        LOGGER.info("Imported %s key %s", key_info.key_type.key_type, address)
        return address

    async def _remove(self, address: str):
        if await self.keystore.delete(address):
            LOGGER.info("Deleted key %s", address)

    async def delete(self, address: str, passphrase: str) -> None:
        """Delete a key after verifying the passphrase; absent keys are ignored."""
        async with self._lock:
            if not await self._get(address):
                return
            await self._passphrase_key(passphrase)
            await self._remove(address)

    async def force_delete(self, address: str) -> None:
        """Delete a key without checking the passphrase."""
        if not address or address.startswith("_"):
            return
        async with self._lock:
            await self._remove(address)

    async def _reseal(
        self,
        old_key: Optional[bytes],
        new_key: Optional[bytes],
        commit: Callable[[], Awaitable],
    ):
        """Re-seal every record under `new_key`, then run `commit`.

        Records already rewritten are restored if a write or the commit fails,
        leaving the keystore readable with the previous key.
        """
        originals = []
        try:
            for address in await self.list():
                record = await self.keystore.get(address)
                if not record:
                    continue
                secret = self._secret(record, old_key)
                resealed = self._record(
                    address, self._key_type(record), secret, new_key
                )
                originals.append((address, record))
                await self.keystore.put(address, resealed)
            await commit()
        except (Exception, asyncio.CancelledError):
            LOGGER.error("Keystore re-seal failed, restoring %d keys", len(originals))
            for address, record in reversed(originals):
                try:
                    await self.keystore.put(address, record)
                except WalletError:
                    LOGGER.exception("Could not restore key %s", address)
            raise

    async def change_passphrase(self, new_passphrase: str) -> bool:
        """Re-seal every key under a new passphrase and keep the keystore unlocked."""
        if not new_passphrase:
            raise WalletError("New passphrase must not be empty")
        async with self._lock:
            old_key = await self._active_key()
            salt = random_salt()
            loop = asyncio.get_event_loop()
            new_key = await loop.run_in_executor(
                None, derive_key, new_passphrase, salt, *self._kdf_limits
            )
            meta = {
                "salt": bytes_to_b64(salt),
                "check": bytes_to_b64(seal(new_key, CHECK_VALUE)),
            }
            await self._reseal(
                old_key, new_key, lambda: self.keystore.put(META_RECORD, meta)
            )
            self._unlocked_key = new_key
        LOGGER.info("Keystore passphrase changed")
        return True

    async def clear_passphrase(self) -> bool:
        """Store every key unsealed and drop the passphrase."""
        async with self._lock:
            old_key = await self._active_key()
            await self._reseal(
                old_key, None, lambda: self.keystore.delete(META_RECORD)
            )
            self._unlocked_key = None
        LOGGER.info("Keystore passphrase cleared")
        return True

    async def is_locked(self) -> bool:
        """Whether the keystore is encrypted and not unlocked."""
        return await self._encrypted() and self._unlocked_key is None

    async def lock(self) -> None:
        """Forget the unlocked keystore key."""
        self._unlocked_key = None

    async def unlock(self, passphrase: str) -> None:
        """Unlock an encrypted keystore; unencrypted keystores are always open."""
        async with self._lock:
            meta = await self._meta()
            if not meta.get("check"):
                return
            self._unlocked_key = await self._derive(meta, passphrase)

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<LocalWallet(keystore={})>".format(self.keystore)
