from unittest import TestCase, mock

from ...wallet.base import BaseWalletBackend
from ...wallet.ledger import BaseLedgerDevice
from ...wallet.local import LocalWallet
from .. import classloader as test_module
from ..classloader import ClassLoader, ClassNotFoundError, ModuleLoadError


class TestClassLoader(TestCase):
    def test_import_loaded(self):
        assert ClassLoader.load_module("unittest")

    def test_import_missing(self):
        assert ClassLoader.load_module("multiwallet.not_a_module") is None
        assert ClassLoader.load_module("not_a_package.module") is None

    def test_import_error(self):
        with mock.patch.object(
            test_module, "import_module", autospec=True
        ) as import_module, mock.patch.dict(test_module.sys.modules):
            test_module.sys.modules.pop("multiwallet.wallet.crypto", None)
            import_module.side_effect = ModuleNotFoundError
            with self.assertRaises(ModuleLoadError):
                ClassLoader.load_module("multiwallet.wallet.crypto")

    def test_load_class(self):
        assert ClassLoader.load_class("TestCase", "unittest") is TestCase
        assert ClassLoader.load_class("unittest.TestCase") is TestCase
        assert (
            ClassLoader.load_class("multiwallet.wallet.local.LocalWallet")
            is LocalWallet
        )

    def test_load_class_missing(self):
        with self.assertRaises(ClassNotFoundError):
            ClassLoader.load_class("NotAClass")
        with self.assertRaises(ClassNotFoundError):
            ClassLoader.load_class("multiwallet.wallet.local.NotAClass")
        with self.assertRaises(ClassNotFoundError):
            ClassLoader.load_class("multiwallet.not_a_module.NotAClass")
        with self.assertRaises(ClassNotFoundError):
            ClassLoader.load_class("multiwallet.wallet.local.META_RECORD")

    def test_load_subclass(self):
        assert (
            ClassLoader.load_subclass(
                "multiwallet.wallet.local.LocalWallet", BaseWalletBackend
            )
            is LocalWallet
        )
        with self.assertRaises(ClassNotFoundError):
            ClassLoader.load_subclass(
                "multiwallet.wallet.local.LocalWallet", BaseLedgerDevice
            )
