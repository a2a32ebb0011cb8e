"""Build the wallet router from settings."""

import logging

from ..config.base import BaseProvider, BaseSettings
from ..utils.classloader import ClassLoader
from .keystore import FileKeyStore, InMemoryKeyStore, KeyStore
from .key_type import KeyTypes
from .ledger import BaseLedgerDevice, LedgerWallet
from .local import LocalWallet
from .multi import MultiWallet
from .remote import RemoteWallet

LOGGER = logging.getLogger(__name__)

DEFAULT_REMOTE_TIMEOUT = 10.0


class MultiWalletProvider(BaseProvider):
    """Provider for the wallet router and its configured backends."""

    def __init__(self, key_types: KeyTypes = None):
        """Initialize the wallet provider."""
        self.key_types = key_types or KeyTypes()

    @staticmethod
    def _keystore(path: str) -> KeyStore:
        return FileKeyStore(path) if path else InMemoryKeyStore()

    async def provide_local(self, settings: BaseSettings):
        """Open the local keystore wallet, if configured."""
        path = settings.get_str("wallet.local.path")
        if not (path or settings.get_bool("wallet.local.in_memory")):
            return None
        wallet = LocalWallet(self._keystore(path), key_types=self.key_types)
        await wallet.open(settings.get_str("wallet.local.passphrase"))
        LOGGER.info("Opened local wallet: %s", wallet)
        return wallet

    def provide_remote(self, settings: BaseSettings):
        """Create the remote wallet client, if configured."""
        endpoint = settings.get_str("wallet.remote.endpoint")
        if not endpoint:
            return None
        wallet = RemoteWallet(
            endpoint,
            api_key=settings.get_str("wallet.remote.api_key"),
            timeout=settings.get_float(
                "wallet.remote.timeout", default=DEFAULT_REMOTE_TIMEOUT
            ),
            key_types=self.key_types,
        )
        LOGGER.info("Using remote wallet: %s", wallet)
        return wallet

    def provide_ledger(self, settings: BaseSettings):
        """Connect the hardware wallet, if configured."""
        device_class = settings.get_str("wallet.ledger.device")
        if not device_class:
            return None
        device_cls = ClassLoader.load_subclass(device_class, BaseLedgerDevice)
        wallet = LedgerWallet(
            device_cls(), self._keystore(settings.get_str("wallet.ledger.path"))
        )
        LOGGER.info("Using ledger wallet: %s", wallet)
        return wallet

    async def provide(self, settings: BaseSettings) -> MultiWallet:
        """Create the wallet router from the configured backends."""
        wallet = MultiWallet(
            local=await self.provide_local(settings),
            remote=self.provide_remote(settings),
            ledger=self.provide_ledger(settings),
            max_delete_rounds=settings.get_int("wallet.max_delete_rounds"),
        )
        if not any(wallet.configured().values()):
            LOGGER.warning("No wallet backends configured")
        return wallet


async def close_wallet(wallet: MultiWallet):
    """Release resources held by the wallet backends."""
    if wallet.remote.is_present():
        remote = wallet.remote.get()
        if isinstance(remote, RemoteWallet):
            await remote.close()
