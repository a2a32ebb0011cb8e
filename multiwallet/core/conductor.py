"""
The Conductor.

The conductor is responsible for opening the configured wallet backends,
serving the admin API in front of the wallet router and releasing backend
resources on shutdown.
"""

import logging

from ..admin.server import AdminServer
from ..config.base import BaseSettings
from ..config.logging import LoggingConfigurator
from ..wallet.key_type import KeyTypes
from ..wallet.multi import MultiWallet
from ..wallet.provider import MultiWalletProvider, close_wallet
from .error import StartupError

LOGGER = logging.getLogger(__name__)


class Conductor:
    """Conductor class.

    Class responsible for starting, stopping and tying together the wallet
    router and the admin server.
    """

    def __init__(self, settings: BaseSettings, provider: MultiWalletProvider = None):
        """
        Initialize an instance of Conductor.

        Args:
            settings: The application settings
            provider: Builds the wallet router from the settings

        """
        self.settings = settings
        self.key_types = KeyTypes()
        self.provider = provider or MultiWalletProvider(self.key_types)
        self.wallet: MultiWallet = None
        self.admin_server: AdminServer = None

    async def setup(self):
        """Initialize the wallet router and the admin server."""
        self.wallet = await self.provider.provide(self.settings)

        if self.settings.get("admin.enabled"):
            try:
                admin_host = self.settings.get("admin.host", "0.0.0.0")
                admin_port = self.settings.get("admin.port", "80")
                self.admin_server = AdminServer(
                    admin_host,
                    admin_port,
                    self.settings,
                    self.wallet,
                    self.stop,
                    self.key_types,
                )
            except Exception:
                LOGGER.exception("Unable to register admin server")
                raise

    async def start(self) -> None:
        """Start the admin server."""
        if not self.wallet:
            raise StartupError("Conductor has not been set up")

        if self.admin_server:
            try:
                await self.admin_server.start()
            except Exception:
                LOGGER.exception("Unable to start admin server")
                raise

        LoggingConfigurator.print_banner(
            [
                name
                for name, present in self.wallet.configured().items()
                if present
            ],
            self.admin_server,
        )

    async def stop(self):
        """Stop the admin server and release the wallet backends."""
        if self.admin_server:
            await self.admin_server.stop()
        if self.wallet:
            await close_wallet(self.wallet)
        LOGGER.info("Conductor stopped")
