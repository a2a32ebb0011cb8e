"""Record stores backing the software and hardware wallets."""

import asyncio
import json
import logging
import os

from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import List, Optional

from .error import WalletError

LOGGER = logging.getLogger(__name__)


class KeyStore(ABC):
    """Abstract store of named JSON records."""

    @abstractmethod
    async def get(self, name: str) -> Optional[dict]:
        """Fetch a record, or None if it does not exist."""

    @abstractmethod
    async def put(self, name: str, record: dict):
        """Create or replace a record."""

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Remove a record, returning whether it existed."""

    @abstractmethod
    async def names(self) -> List[str]:
        """List the names of all stored records."""


class InMemoryKeyStore(KeyStore):
    """Key store keeping records in process memory."""

    def __init__(self):
        """Initialize an `InMemoryKeyStore` instance."""
        self.records = {}

    async def get(self, name: str) -> Optional[dict]:
        """Fetch a record, or None if it does not exist."""
        record = self.records.get(name)
        return deepcopy(record) if record is not None else None

    async def put(self, name: str, record: dict):
        """Create or replace a record."""
        self.records[name] = deepcopy(record)

    async def delete(self, name: str) -> bool:
        """Remove a record, returning whether it existed."""
        return self.records.pop(name, None) is not None

    async def names(self) -> List[str]:
        """List the names of all stored records."""
        return list(self.records)


class FileKeyStore(KeyStore):
    """Key store keeping one JSON file per record in a directory."""

    SUFFIX = ".json"

    def __init__(self, path: str):
        """
        Initialize a `FileKeyStore` instance.

        Args:
            path: The directory holding the records, created if missing

        """
        self.path = Path(path)

    async def _run(self, fn, *args):
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, fn, *args)
        except OSError as err:
            raise WalletError(f"Keystore I/O error in {self.path}") from err

    @staticmethod
    def _valid(name: str) -> bool:
        return bool(name) and not name.startswith(".") and not any(
            sep in name for sep in (os.sep, os.altsep, "/") if sep
        )

    def _file(self, name: str) -> Path:
        if not self._valid(name):
            raise WalletError(f"Invalid keystore record name: {name}")
        return self.path / f"{name}{self.SUFFIX}"

    def _read(self, name: str) -> Optional[dict]:
        target = self._file(name)
        if not target.exists():
            return None
        try:
            return json.loads(target.read_text(encoding="utf-8"))
        except ValueError as err:
            raise WalletError(f"Corrupt keystore record: {target}") from err

    def _write(self, name: str, record: dict):
        target = self._file(name)
        self.path.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{target.name}.tmp")
        tmp.write_text(json.dumps(record), encoding="utf-8")
        os.chmod(tmp, 0o600)
        os.replace(tmp, target)

    def _remove(self, name: str) -> bool:
        target = self._file(name)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        return True

    def _list(self) -> List[str]:
        if not self.path.exists():
            return []
        return sorted(
            entry.name[: -len(self.SUFFIX)]
            for entry in self.path.iterdir()
            if entry.is_file()
            and entry.name.endswith(self.SUFFIX)
            and not entry.name.startswith(".")
        )

    async def get(self, name: str) -> Optional[dict]:
        """Fetch a record, or None if it does not exist."""
        if not self._valid(name):
            return None
        return await self._run(self._read, name)

    async def put(self, name: str, record: dict):
        """Create or replace a record."""
        LOGGER.debug("Writing keystore record %s", name)
        await self._run(self._write, name, record)

    async def delete(self, name: str) -> bool:
        """Remove a record, returning whether it existed."""
        if not self._valid(name):
            return False
        return await self._run(self._remove, name)

    async def names(self) -> List[str]:
        """List the names of all stored records."""
        return await self._run(self._list)

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<FileKeyStore(path={})>".format(self.path)
