"""Hardware token implementation of the wallet backend."""

import asyncio
import json
import logging

from abc import ABC, abstractmethod
from typing import Sequence

from .base import BaseWalletBackend
from .error import (
    KeyNotFoundError,
    UnsupportedOperationError,
    WalletDuplicateError,
    WalletError,
)
from .key_info import MSG_TYPE_CHAIN_MSG, KeyInfo, MsgMeta, Signature
from .key_type import SECP256K1, SECP256K1_LEDGER, KeyType
from .keystore import KeyStore
from .util import public_key_to_address

LOGGER = logging.getLogger(__name__)

HD_PURPOSE = 44 | 0x80000000
HD_COIN_TYPE = 461 | 0x80000000
HD_ACCOUNT = 0 | 0x80000000


class LedgerDeviceError(WalletError):
    """Error raised by a hardware signing device."""


class BaseLedgerDevice(ABC):
    """Transport to a hardware signing token.

    Calls may wait for physical confirmation on the device.
    """

    @abstractmethod
    async def get_public_key(self, path: Sequence[int]) -> bytes:
        """Fetch the compressed secp256k1 public key at a derivation path."""

    @abstractmethod
    async def sign(self, path: Sequence[int], message: bytes) -> bytes:
        """Sign a message with the key at a derivation path."""


def derivation_path(index: int) -> list:
    """Derivation path of the key with the given index."""
    return [HD_PURPOSE, HD_COIN_TYPE, HD_ACCOUNT, 0, index]


def format_path(path: Sequence[int]) -> str:
    """Render a derivation path as `m/44'/461'/...`."""
    parts = ["m"]
    for level in path:
        if level & 0x80000000:
            parts.append(f"{level & 0x7FFFFFFF}'")
        else:
            parts.append(str(level))
    return "/".join(parts)


class LedgerWallet(BaseWalletBackend):
    """Wallet whose keys never leave a hardware token.

    Only derivation records (path and public key) are persisted.
    """

    def __init__(self, device: BaseLedgerDevice, keystore: KeyStore):
        """
        Initialize a `LedgerWallet` instance.

        Args:
            device: The hardware device transport
            keystore: Record store for derivation records

        """
        self.device = device
        self.keystore = keystore
        self._lock = asyncio.Lock()

    async def _device_call(self, coro):
        try:
            return await coro
        except WalletError:
            raise
        except (OSError, ValueError) as err:
            raise LedgerDeviceError("Hardware device communication failed") from err

    async def _record(self, address: str) -> dict:
        record = await self.keystore.get(address)
        if not record:
            raise KeyNotFoundError(f"Key not found: {address}")
        return record

    async def _save(self, path: Sequence[int], public_key: bytes) -> str:
        address = public_key_to_address(SECP256K1, public_key)
        if await self.keystore.get(address):
            raise WalletDuplicateError(f"Key already present in wallet: {address}")
        await self.keystore.put(
            address,
            {"address": address, "path": list(path), "public_key": public_key.hex()},
        )
        LOGGER.info("Registered ledger key %s at %s", address, format_path(path))
        return address

    async def _next_index(self) -> int:
        index = 0
        for name in await self.keystore.names():
            record = await self.keystore.get(name)
            if record:
                index = max(index, record["path"][-1] + 1)
        return index

    async def new(self, key_type: KeyType) -> str:
        """Register the next key derived on the device."""
        if key_type is not SECP256K1_LEDGER:
            raise UnsupportedOperationError(
                f"Ledger wallet does not support key type: {key_type.key_type}"
            )
        async with self._lock:
            path = derivation_path(await self._next_index())
            public_key = await self._device_call(self.device.get_public_key(path))
            return await self._save(path, public_key)

    async def has(self, address: str) -> bool:
        """Check whether a derivation record exists for the address."""
        return await self.keystore.get(address) is not None

    async def list(self) -> Sequence[str]:
        """List the registered ledger addresses."""
        return await self.keystore.names()

    async def sign(self, address: str, message: bytes, meta: MsgMeta) -> Signature:
        """Sign a chain message on the device."""
        record = await self._record(address)
        if meta.type != MSG_TYPE_CHAIN_MSG:
            raise UnsupportedOperationError(
                f"Ledger can only sign chain messages, not {meta.type}"
            )
        data = await self._device_call(self.device.sign(record["path"], message))
        return Signature(SECP256K1, data)

    async def export(self, address: str, passphrase: str) -> KeyInfo:
        """Hardware keys cannot be exported."""
        raise UnsupportedOperationError("Ledger keys cannot be exported")

    async def import_key(self, key_info: KeyInfo) -> str:
        """Register a key already present on the device from its derivation record."""
        if key_info.key_type is not SECP256K1_LEDGER:
            raise UnsupportedOperationError(
                f"Ledger wallet does not support key type: "
                f"{key_info.key_type.key_type}"
            )
        try:
            info = json.loads(key_info.private_key)
            path = [int(level) for level in info["path"]]
        except (ValueError, KeyError, TypeError) as err:
            raise WalletError("Invalid ledger key info") from err
        async with self._lock:
            public_key = await self._device_call(self.device.get_public_key(path))
            return await self._save(path, public_key)

    async def delete(self, address: str, passphrase: str) -> None:
        """Forget the derivation record; the device key itself is untouched."""
        if await self.keystore.delete(address):
            LOGGER.info("Removed ledger key %s", address)

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<LedgerWallet(device={})>".format(self.device.__class__.__name__)


def ledger_key_info(path: Sequence[int]) -> KeyInfo:
    """Build the import payload for a ledger key at a derivation path."""
    return KeyInfo(
        SECP256K1_LEDGER, json.dumps({"path": list(path)}).encode("utf-8")
    )
