import json
from unittest import IsolatedAsyncioTestCase

from aiohttp import web

from ...tests import mock
from .. import routes as test_module
from ..error import (
    KeyNotFoundError,
    NoBackendAvailableError,
    UnsupportedOperationError,
    WalletError,
    WalletLockedError,
)
from ..key_info import MSG_TYPE_CHAIN_MSG, KeyInfo, MsgMeta, Signature
from ..key_type import ED25519, SECP256K1, SECP256K1_LEDGER, KeyTypes
from ..multi import MultiWallet
from ..util import bytes_to_b64


class TestWalletRoutes(IsolatedAsyncioTestCase):
    def setUp(self):
        self.wallet = mock.create_autospec(MultiWallet, instance=True)
        self.request = mock.MagicMock(
            app={"wallet": self.wallet, "key_types": KeyTypes()},
            match_info={},
            query={},
        )
        self.request.json = mock.AsyncMock(return_value={})

    async def test_missing_wallet(self):
        self.request.app = {"key_types": KeyTypes()}
        for handler in (
            test_module.wallet_create_key,
            test_module.wallet_list_keys,
            test_module.wallet_has_key,
            test_module.wallet_lock_status,
        ):
            with self.assertRaises(web.HTTPForbidden):
                await handler(self.request)

    def test_format(self):
        assert test_module.format_signature(Signature(ED25519, b"sig")) == {
            "key_type": "ed25519",
            "data": bytes_to_b64(b"sig"),
        }
        assert test_module.format_key_info(KeyInfo(SECP256K1, b"secret")) == {
            "key_type": "secp256k1",
            "private_key": bytes_to_b64(b"secret"),
        }

    def test_http_error_mapping(self):
        cases = (
            (KeyNotFoundError("missing"), web.HTTPNotFound),
            (UnsupportedOperationError("refused"), web.HTTPNotImplemented),
            (NoBackendAvailableError("none"), web.HTTPServiceUnavailable),
            (WalletLockedError("locked"), web.HTTPForbidden),
            (WalletError("broken"), web.HTTPBadRequest),
        )
        for err, http_cls in cases:
            result = test_module.wallet_http_error(err)
            assert type(result) is http_cls
            assert json.loads(result.text) == {
                "error": err.__class__.__name__,
                "reason": err.roll_up,
            }

    async def test_create_key(self):
        self.request.json.return_value = {"key_type": "secp256k1-ledger"}
        self.wallet.new.return_value = "zA"
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_create_key(self.request)
            json_response.assert_called_once_with({"address": "zA"})
        self.wallet.new.assert_awaited_once_with(SECP256K1_LEDGER)

    async def test_create_key_unknown_type(self):
        self.request.json.return_value = {"key_type": "rsa"}
        with self.assertRaises(web.HTTPBadRequest):
            await test_module.wallet_create_key(self.request)
        self.wallet.new.assert_not_awaited()

    async def test_create_key_no_backend(self):
        self.request.json.return_value = {"key_type": "ed25519"}
        self.wallet.new.side_effect = NoBackendAvailableError("none")
        with self.assertRaises(web.HTTPServiceUnavailable):
            await test_module.wallet_create_key(self.request)

    async def test_list_keys(self):
        self.wallet.list.return_value = ["zA", "zB"]
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_list_keys(self.request)
            json_response.assert_called_once_with({"results": ["zA", "zB"]})

    async def test_list_keys_failure(self):
        self.wallet.list.side_effect = WalletError("unreachable")
        with self.assertRaises(web.HTTPBadRequest):
            await test_module.wallet_list_keys(self.request)

    async def test_has_key(self):
        self.request.match_info = {"address": "zA"}
        self.wallet.has.return_value = False
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_has_key(self.request)
            json_response.assert_called_once_with({"address": "zA", "has": False})

    async def test_import_key(self):
        self.request.json.return_value = {
            "key_info": {"key_type": "ed25519", "private_key": bytes_to_b64(b"sk")}
        }
        self.wallet.import_key.return_value = "zA"
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_import_key(self.request)
            json_response.assert_called_once_with({"address": "zA"})
        self.wallet.import_key.assert_awaited_once_with(KeyInfo(ED25519, b"sk"))

    async def test_import_key_bad_base64(self):
        self.request.json.return_value = {
            "key_info": {"key_type": "ed25519", "private_key": "abcde"}
        }
        with self.assertRaises(web.HTTPBadRequest):
            await test_module.wallet_import_key(self.request)

    async def test_sign(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {
            "message": bytes_to_b64(b"msg"),
            "meta": {"type": MSG_TYPE_CHAIN_MSG},
        }
        self.wallet.sign.return_value = Signature(SECP256K1, b"sig")
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_sign(self.request)
            json_response.assert_called_once_with(
                {"signature": {"key_type": "secp256k1", "data": bytes_to_b64(b"sig")}}
            )
        self.wallet.sign.assert_awaited_once_with(
            "zA", b"msg", MsgMeta(type=MSG_TYPE_CHAIN_MSG, extra=b"")
        )

    async def test_sign_default_meta(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {"message": bytes_to_b64(b"msg")}
        self.wallet.sign.return_value = Signature(ED25519, b"sig")
        with mock.patch.object(test_module.web, "json_response"):
            await test_module.wallet_sign(self.request)
        self.wallet.sign.assert_awaited_once_with("zA", b"msg", MsgMeta())

    async def test_sign_not_found(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {"message": bytes_to_b64(b"msg")}
        self.wallet.sign.side_effect = KeyNotFoundError("Key not found: zA")
        with self.assertRaises(web.HTTPNotFound) as ctx:
            await test_module.wallet_sign(self.request)
        assert json.loads(ctx.exception.text)["error"] == "KeyNotFoundError"

    async def test_export_key(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {"passphrase": "pass"}
        self.wallet.export.return_value = KeyInfo(ED25519, b"sk")
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_export_key(self.request)
            json_response.assert_called_once_with(
                {"key_info": {"key_type": "ed25519", "private_key": bytes_to_b64(b"sk")}}
            )
        self.wallet.export.assert_awaited_once_with("zA", "pass")

    async def test_export_key_unsupported(self):
        self.request.match_info = {"address": "zA"}
        self.wallet.export.side_effect = UnsupportedOperationError("hardware")
        with self.assertRaises(web.HTTPNotImplemented):
            await test_module.wallet_export_key(self.request)

    async def test_delete_key(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {"passphrase": "pass"}
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_delete_key(self.request)
            json_response.assert_called_once_with({})
        self.wallet.delete.assert_awaited_once_with("zA", "pass")

    async def test_sign_with_passphrase(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {
            "message": bytes_to_b64(b"msg"),
            "passphrase": "pass",
        }
        self.wallet.sign_with_passphrase.return_value = Signature(ED25519, b"sig")
        with mock.patch.object(test_module.web, "json_response"):
            await test_module.wallet_sign_with_passphrase(self.request)
        self.wallet.sign_with_passphrase.assert_awaited_once_with("zA", b"msg", "pass")

    async def test_sign_with_passphrase_locked(self):
        self.request.match_info = {"address": "zA"}
        self.request.json.return_value = {"message": bytes_to_b64(b"msg")}
        self.wallet.sign_with_passphrase.side_effect = WalletLockedError("wrong")
        with self.assertRaises(web.HTTPForbidden):
            await test_module.wallet_sign_with_passphrase(self.request)

    async def test_passphrase(self):
        self.request.json.return_value = {"new_passphrase": "new"}
        self.wallet.change_passphrase.return_value = True
        self.wallet.clear_passphrase.return_value = True
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_change_passphrase(self.request)
            json_response.assert_called_once_with({"result": True})
            await test_module.wallet_clear_passphrase(self.request)
        self.wallet.change_passphrase.assert_awaited_once_with("new")
        self.wallet.clear_passphrase.assert_awaited_once_with()

    async def test_passphrase_no_local(self):
        self.wallet.clear_passphrase.side_effect = NoBackendAvailableError("none")
        with self.assertRaises(web.HTTPServiceUnavailable):
            await test_module.wallet_clear_passphrase(self.request)

    async def test_lock_unlock(self):
        self.request.json.return_value = {"passphrase": "pass"}
        self.wallet.is_locked.side_effect = [True, True, False]
        with mock.patch.object(test_module.web, "json_response") as json_response:
            await test_module.wallet_lock_status(self.request)
            json_response.assert_called_with({"locked": True})
            await test_module.wallet_lock(self.request)
            json_response.assert_called_with({"locked": True})
            await test_module.wallet_unlock(self.request)
            json_response.assert_called_with({"locked": False})
        self.wallet.lock.assert_awaited_once_with()
        self.wallet.unlock.assert_awaited_once_with("pass")

    async def test_unlock_wrong_passphrase(self):
        self.wallet.unlock.side_effect = WalletLockedError("Incorrect passphrase")
        with self.assertRaises(web.HTTPForbidden):
            await test_module.wallet_unlock(self.request)

    async def test_register(self):
        mock_app = mock.MagicMock()
        mock_app.add_routes = mock.MagicMock()

        await test_module.register(mock_app)
        mock_app.add_routes.assert_called_once()

    async def test_post_process_routes(self):
        mock_app = mock.MagicMock(_state={"swagger_dict": {}})
        test_module.post_process_routes(mock_app)
        assert "tags" in mock_app._state["swagger_dict"]
