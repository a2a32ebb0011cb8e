"""Router dispatching key management requests across wallet backends."""

import logging
from typing import Dict, List, Optional, Sequence

from .base import BaseKeystoreWallet, BaseWalletBackend
from .error import (
    KeyNotFoundError,
    NoBackendAvailableError,
    UnsupportedOperationError,
    WalletError,
)
from .key_info import KeyInfo, MsgMeta, Signature
from .key_type import KeyType
from .slot import WalletSlot

LOGGER = logging.getLogger(__name__)

SLOT_LOCAL = "local"
SLOT_REMOTE = "remote"
SLOT_LEDGER = "ledger"


async def find_owner(
    address: str, *slots: WalletSlot
) -> Optional[BaseWalletBackend]:
    """Find the first present backend claiming ownership of an address.

    Slots are searched strictly in the order given and empty slots are skipped.
    A failing ownership check aborts the search: lower priority backends are not
    consulted.

    Args:
        address: The key address to resolve
        slots: The candidate slots in priority order

    Returns:
        The owning backend, or None if no present backend owns the address

    """
    for slot in slots:
        if not slot.is_present():
            continue
        backend = slot.get()
        if await backend.has(address):
            LOGGER.debug("Address %s resolved to %s wallet", address, slot.name)
            return backend
    return None


class MultiWallet(BaseKeystoreWallet):
    """Uniform key management surface over local, remote and ledger backends."""

    MAX_DELETE_ROUNDS = 16

    SEARCH_ORDER = (SLOT_REMOTE, SLOT_LEDGER, SLOT_LOCAL)
    EXPORT_ORDER = (SLOT_REMOTE, SLOT_LOCAL)
    LIST_ORDER = (SLOT_REMOTE, SLOT_LEDGER, SLOT_LOCAL)

    def __init__(
        self,
        local: BaseWalletBackend = None,
        remote: BaseWalletBackend = None,
        ledger: BaseWalletBackend = None,
        *,
        max_delete_rounds: int = None,
    ):
        """
        Initialize a `MultiWallet` instance.

        Args:
            local: The encrypted on-disk keystore, if configured
            remote: The network signing service, if configured
            ledger: The hardware signer, if configured
            max_delete_rounds: Bound on resolve-then-delete iterations

        """
        self._slots: Dict[str, WalletSlot] = {
            SLOT_LOCAL: WalletSlot(SLOT_LOCAL, local),
            SLOT_REMOTE: WalletSlot(SLOT_REMOTE, remote),
            SLOT_LEDGER: WalletSlot(SLOT_LEDGER, ledger),
        }
        if max_delete_rounds is None:
            max_delete_rounds = self.MAX_DELETE_ROUNDS
        elif max_delete_rounds < 1:
            raise ValueError("max_delete_rounds must be at least 1")
        self._max_delete_rounds = max_delete_rounds

    @property
    def local(self) -> WalletSlot:
        """Accessor for the local keystore slot."""
        return self._slots[SLOT_LOCAL]

    @property
    def remote(self) -> WalletSlot:
        """Accessor for the remote wallet slot."""
        return self._slots[SLOT_REMOTE]

    @property
    def ledger(self) -> WalletSlot:
        """Accessor for the hardware wallet slot."""
        return self._slots[SLOT_LEDGER]

    def configured(self) -> Dict[str, bool]:
        """Report which backend slots are configured."""
        return {name: slot.is_present() for name, slot in self._slots.items()}

    def _ordered(self, order: Sequence[str]) -> List[WalletSlot]:
        return [self._slots[name] for name in order]

    async def _find(self, address: str, order: Sequence[str]):
        return await find_owner(address, *self._ordered(order))

    def _origin(self, key_type: KeyType, action: str) -> BaseWalletBackend:
        """Select the backend which originates keys of a given type."""
        candidate = self.ledger if key_type.hardware else self.local
        for slot in (self.remote, candidate):
            if slot.is_present():
                LOGGER.debug(
                    "Routing %s of %s key to %s wallet",
                    action,
                    key_type.key_type,
                    slot.name,
                )
                return slot.get()
        raise NoBackendAvailableError(
            f"No wallet backends supporting key type: {key_type.key_type}"
        )

    async def new(self, key_type: KeyType) -> str:
        """Create a key in the remote wallet, or else the type's origin backend."""
        return await self._origin(key_type, "creation").new(key_type)

    async def has(self, address: str) -> bool:
        """Check whether any configured backend owns an address."""
        return await self._find(address, self.SEARCH_ORDER) is not None

    async def list(self) -> Sequence[str]:
        """List the addresses of all backends, without duplicates.

        Addresses keep the position of their first occurrence when backends are
        visited in the order remote, ledger, local.
        """
        results = []
        seen = set()
        for slot in self._ordered(self.LIST_ORDER):
            if not slot.is_present():
                continue
            for address in await slot.get().list():
                if address in seen:
                    continue
                seen.add(address)
                results.append(address)
        return results

    async def sign(self, address: str, message: bytes, meta: MsgMeta) -> Signature:
        """Sign with the backend owning the address."""
        backend = await self._find(address, self.SEARCH_ORDER)
        if not backend:
            raise KeyNotFoundError(f"Key not found: {address}")
        return await backend.sign(address, message, meta)

    async def export(self, address: str, passphrase: str) -> KeyInfo:
        """Export key material; hardware keys are never searched."""
        backend = await self._find(address, self.EXPORT_ORDER)
        if not backend:
            raise KeyNotFoundError(f"Key not found: {address}")
        return await backend.export(address, passphrase)

    async def import_key(self, key_info: KeyInfo) -> str:
        """Import key material into the backend chosen by its key type."""
        return await self._origin(key_info.key_type, "import").import_key(key_info)

    async def delete(self, address: str, passphrase: str) -> None:
        """Delete a key from every backend claiming it.

        Ownership is resolved from scratch after each deletion so that an address
        registered in several backends ends up owned by none.

        Raises:
            WalletError: If a backend fails, or still claims the address after
                the maximum number of delete rounds

        """
        for attempt in range(self._max_delete_rounds):
            backend = await self._find(address, self.SEARCH_ORDER)
            if not backend:
                return
            if attempt:
                LOGGER.info(
                    "Address %s still owned after %d delete round(s)",
                    address,
                    attempt,
                )
            await backend.delete(address, passphrase)
        if await self._find(address, self.SEARCH_ORDER):
            raise WalletError(
                f"Key {address} still owned after "
                f"{self._max_delete_rounds} delete rounds"
            )

    def _keystore(self) -> BaseKeystoreWallet:
        backend = self.local.get()
        if not isinstance(backend, BaseKeystoreWallet):
            raise UnsupportedOperationError(
                "Local wallet backend does not manage a passphrase"
            )
        return backend

    async def change_passphrase(self, new_passphrase: str) -> bool:
        """Change the local keystore passphrase."""
        return await self._keystore().change_passphrase(new_passphrase)

    async def clear_passphrase(self) -> bool:
        """Clear the local keystore passphrase."""
        return await self._keystore().clear_passphrase()

    async def is_locked(self) -> bool:
        """Check whether the local keystore is locked."""
        return await self._keystore().is_locked()

    async def lock(self) -> None:
        """Lock the local keystore."""
        await self._keystore().lock()

    async def unlock(self, passphrase: str) -> None:
        """Unlock the local keystore."""
        await self._keystore().unlock(passphrase)

    async def sign_with_passphrase(
        self, address: str, message: bytes, passphrase: str
    ) -> Signature:
        """Sign with a local key using an explicit passphrase."""
        return await self._keystore().sign_with_passphrase(
            address, message, passphrase
        )

    async def force_delete(self, address: str) -> None:
        """Delete a local key without checking the passphrase."""
        await self._keystore().force_delete(address)

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<MultiWallet({})>".format(
            ", ".join(name for name, present in self.configured().items() if present)
        )
