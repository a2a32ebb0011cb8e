"""Wallet-related exceptions."""

from ..core.error import BaseError


class WalletError(BaseError):
    """General wallet backend exception."""


class KeyNotFoundError(WalletError):
    """No configured backend owns the requested key."""


class NoBackendAvailableError(WalletError):
    """No eligible wallet backend is configured for the operation."""


class UnsupportedOperationError(WalletError):
    """The wallet backend refuses an operation it cannot perform."""


class WalletLockedError(WalletError):
    """The keystore is locked or the passphrase does not match."""


class WalletDuplicateError(WalletError):
    """Duplicate key exception."""
