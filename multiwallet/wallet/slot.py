"""Optional wallet backend holder."""

from typing import Optional

from .base import BaseWalletBackend
from .error import NoBackendAvailableError


class WalletSlot:
    """A named position for a wallet backend which may be left unconfigured."""

    def __init__(self, name: str, backend: Optional[BaseWalletBackend] = None):
        """Initialize a `WalletSlot` instance."""
        self._name = name
        self._backend = backend

    @property
    def name(self) -> str:
        """Accessor for the slot name."""
        return self._name

    def is_present(self) -> bool:
        """Whether a backend is configured in this slot.

        Never performs I/O: a present backend holding zero keys is still present.
        """
        return self._backend is not None

    def get(self) -> BaseWalletBackend:
        """Fetch the configured backend.

        Raises:
            NoBackendAvailableError: If the slot is empty

        """
        if self._backend is None:
            raise NoBackendAvailableError(
                f"No {self._name} wallet backend configured"
            )
        return self._backend

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<WalletSlot({}, {})>".format(self._name, self._backend)
