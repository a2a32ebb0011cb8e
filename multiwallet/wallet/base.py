"""Wallet backend base classes."""

from abc import ABC, abstractmethod
from typing import Sequence

from .key_info import KeyInfo, MsgMeta, Signature
from .key_type import KeyType


class BaseWalletBackend(ABC):
    """Abstract key custody backend interface.

    Every operation acts only on the keys owned by this backend.
    """

    @abstractmethod
    async def new(self, key_type: KeyType) -> str:
        """Generate and persist a new key.

        Args:
            key_type: The type of key to generate

        Returns:
            The address of the new key

        Raises:
            WalletError: If the key could not be created

        """

    @abstractmethod
    async def has(self, address: str) -> bool:
        """Check whether this backend owns a key.

        Args:
            address: The address of the key

        Returns:
            True if the key is owned by this backend

        Raises:
            WalletError: Only if the backend could not be queried

        """

    @abstractmethod
    async def list(self) -> Sequence[str]:
        """List the addresses of all owned keys, in backend-defined order."""

    @abstractmethod
    async def sign(self, address: str, message: bytes, meta: MsgMeta) -> Signature:
        """Sign a message.

        Args:
            address: The address of the signing key
            message: The bytes to sign
            meta: Context describing the message

        Returns:
            The `Signature`

        Raises:
            KeyNotFoundError: If the key is not owned by this backend
            WalletError: If signing failed

        """

    @abstractmethod
    async def export(self, address: str, passphrase: str) -> KeyInfo:
        """Export key material.

        Raises:
            KeyNotFoundError: If the key is not owned by this backend
            UnsupportedOperationError: If the backend never releases key material
            WalletError: If the export failed

        """

    @abstractmethod
    async def import_key(self, key_info: KeyInfo) -> str:
        """Persist externally supplied key material and return its address."""

    @abstractmethod
    async def delete(self, address: str, passphrase: str) -> None:
        """Remove a key.

        Deleting a key which is not owned by the backend succeeds.

        Raises:
            WalletError: On a genuine storage or transport failure

        """

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<{}>".format(self.__class__.__name__)


class BaseKeystoreWallet(BaseWalletBackend):
    """Backend storing encrypted key material under a shared passphrase."""

    @abstractmethod
    async def change_passphrase(self, new_passphrase: str) -> bool:
        """Re-encrypt all keys under a new passphrase."""

    @abstractmethod
    async def clear_passphrase(self) -> bool:
        """Remove the passphrase, storing keys unencrypted."""

    @abstractmethod
    async def is_locked(self) -> bool:
        """Check whether the key material is currently inaccessible."""

    @abstractmethod
    async def lock(self) -> None:
        """Forget the unlocked passphrase."""

    @abstractmethod
    async def unlock(self, passphrase: str) -> None:
        """Verify and remember the passphrase.

        Raises:
            WalletLockedError: If the passphrase is wrong

        """

    @abstractmethod
    async def sign_with_passphrase(
        self, address: str, message: bytes, passphrase: str
    ) -> Signature:
        """Sign using an explicit passphrase, independent of the lock state."""

    @abstractmethod
    async def force_delete(self, address: str) -> None:
        """Remove a key without checking the passphrase."""
