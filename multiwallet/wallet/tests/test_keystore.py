import json
import os
import stat
from tempfile import TemporaryDirectory
from unittest import IsolatedAsyncioTestCase

from ...tests import mock
from ..error import WalletError
from ..keystore import FileKeyStore, InMemoryKeyStore


class TestInMemoryKeyStore(IsolatedAsyncioTestCase):
    async def test_crud(self):
        store = InMemoryKeyStore()
        assert await store.get("a") is None
        await store.put("a", {"value": [1]})
        assert await store.get("a") == {"value": [1]}
        assert await store.names() == ["a"]
        assert await store.delete("a")
        assert not await store.delete("a")
        assert await store.names() == []

    async def test_records_copied(self):
        store = InMemoryKeyStore()
        record = {"value": [1]}
        await store.put("a", record)
        record["value"].append(2)
        fetched = await store.get("a")
        fetched["value"].append(3)
        assert await store.get("a") == {"value": [1]}


class TestFileKeyStore(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmp = TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "keystore")
        self.store = FileKeyStore(self.path)

    async def asyncTearDown(self):
        self.tmp.cleanup()

    async def test_crud(self):
        assert await self.store.names() == []
        assert await self.store.get("b") is None
        await self.store.put("b", {"value": 2})
        await self.store.put("a", {"value": 1})
        assert await self.store.get("b") == {"value": 2}
        assert await self.store.names() == ["a", "b"]
        assert await self.store.delete("a")
        assert not await self.store.delete("a")
        assert await self.store.names() == ["b"]

    async def test_file_layout(self):
        await self.store.put("a", {"value": 1})
        target = os.path.join(self.path, "a.json")
        with open(target, encoding="utf-8") as fh:
            assert json.load(fh) == {"value": 1}
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600
        assert os.listdir(self.path) == ["a.json"]

    async def test_ignores_foreign_files(self):
        os.makedirs(self.path)
        with open(os.path.join(self.path, "notes.txt"), "w") as fh:
            fh.write("x")
        with open(os.path.join(self.path, ".a.json.tmp"), "w") as fh:
            fh.write("x")
        assert await self.store.names() == []

    async def test_invalid_name(self):
        with self.assertRaises(WalletError):
            await self.store.put("../escape", {})
        with self.assertRaises(WalletError):
            await self.store.put(".hidden", {})
        assert not os.path.exists(self.path)

    async def test_invalid_name_absent(self):
        await self.store.put("a", {"value": 1})
        for name in ("", ".hidden", "../escape", "a/../a", os.path.join("x", "a")):
            assert await self.store.get(name) is None
            assert not await self.store.delete(name)
        assert await self.store.names() == ["a"]

    async def test_corrupt_record(self):
        os.makedirs(self.path)
        with open(os.path.join(self.path, "a.json"), "w") as fh:
            fh.write("{not json")
        with self.assertRaises(WalletError):
            await self.store.get("a")

    async def test_io_error(self):
        with mock.patch.object(
            self.store, "_write", mock.MagicMock(side_effect=PermissionError())
        ):
            with self.assertRaises(WalletError) as ctx:
                await self.store.put("a", {})
        assert isinstance(ctx.exception.__cause__, PermissionError)
        assert "FileKeyStore" in repr(self.store)
