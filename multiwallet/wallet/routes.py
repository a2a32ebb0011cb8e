"""Wallet admin routes."""

import binascii
import json
import logging

from aiohttp import web
from aiohttp_apispec import docs, match_info_schema, request_schema, response_schema

from .error import (
    KeyNotFoundError,
    NoBackendAvailableError,
    UnsupportedOperationError,
    WalletError,
    WalletLockedError,
)
from .key_info import KeyInfo, MsgMeta, Signature
from .key_type import KeyTypes
from .models.web_requests import (
    AddressListSchema,
    AddressMatchInfoSchema,
    AddressResultSchema,
    BoolResultSchema,
    ChangePassphraseSchema,
    HasKeyResultSchema,
    KeyCreateSchema,
    KeyImportSchema,
    KeyInfoResultSchema,
    LockStatusSchema,
    PassphraseSchema,
    SignatureResultSchema,
    SignRequestSchema,
    SignWithPassphraseSchema,
    WalletModuleResponseSchema,
)
from .multi import MultiWallet
from .util import b64_to_bytes, bytes_to_b64

LOGGER = logging.getLogger(__name__)

HTTP_ERRORS = (
    (KeyNotFoundError, web.HTTPNotFound),
    (UnsupportedOperationError, web.HTTPNotImplemented),
    (NoBackendAvailableError, web.HTTPServiceUnavailable),
    (WalletLockedError, web.HTTPForbidden),
    (WalletError, web.HTTPBadRequest),
)


def wallet_http_error(err: WalletError) -> web.HTTPException:
    """Build the HTTP error response describing a wallet error."""
    http_cls = next(cls for kind, cls in HTTP_ERRORS if isinstance(err, kind))
    return http_cls(
        reason=err.roll_up,
        text=json.dumps({"error": err.__class__.__name__, "reason": err.roll_up}),
        content_type="application/json",
    )


def format_signature(signature: Signature) -> dict:
    """Serialize a Signature object."""
    return {
        "key_type": signature.key_type.key_type,
        "data": bytes_to_b64(signature.data),
    }


def format_key_info(key_info: KeyInfo) -> dict:
    """Serialize a KeyInfo object."""
    return {
        "key_type": key_info.key_type.key_type,
        "private_key": bytes_to_b64(key_info.private_key),
    }


def _decode_b64(value: str, name: str) -> bytes:
    try:
        return b64_to_bytes(value or "")
    except (binascii.Error, ValueError):
        raise web.HTTPBadRequest(reason=f"Invalid base64 value for {name}")


def _key_type(request: web.BaseRequest, key_type: str):
    key_types: KeyTypes = request.app["key_types"]
    resolved = key_types.from_key_type(key_type or "")
    if not resolved:
        raise web.HTTPBadRequest(reason=f"Unknown key type: {key_type}")
    return resolved


def _wallet(request: web.BaseRequest) -> MultiWallet:
    wallet = request.app.get("wallet")
    if wallet is None:
        raise web.HTTPForbidden(reason="No wallet available")
    return wallet


@docs(tags=["wallet"], summary="Create a key in the responsible wallet backend")
@request_schema(KeyCreateSchema())
@response_schema(AddressResultSchema(), 200, description="")
async def wallet_create_key(request: web.BaseRequest):
    """Request handler for creating a new key.

    Args:
        request: aiohttp request object

    Returns:
        The address of the new key

    """
    wallet = _wallet(request)
    body = await request.json()
    key_type = _key_type(request, body.get("key_type"))
    try:
        address = await wallet.new(key_type)
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"address": address})


@docs(tags=["wallet"], summary="List the addresses of all wallet backends")
@response_schema(AddressListSchema(), 200, description="")
async def wallet_list_keys(request: web.BaseRequest):
    """Request handler for listing key addresses."""
    wallet = _wallet(request)
    try:
        results = await wallet.list()
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"results": list(results)})


@docs(tags=["wallet"], summary="Check whether a wallet backend owns a key")
@match_info_schema(AddressMatchInfoSchema())
@response_schema(HasKeyResultSchema(), 200, description="")
async def wallet_has_key(request: web.BaseRequest):
    """Request handler for checking key ownership."""
    wallet = _wallet(request)
    address = request.match_info["address"]
    try:
        has = await wallet.has(address)
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"address": address, "has": has})


@docs(tags=["wallet"], summary="Import key material")
@request_schema(KeyImportSchema())
@response_schema(AddressResultSchema(), 200, description="")
async def wallet_import_key(request: web.BaseRequest):
    """Request handler for importing a key."""
    wallet = _wallet(request)
    body = await request.json()
    key_info = body.get("key_info") or {}
    info = KeyInfo(
        _key_type(request, key_info.get("key_type")),
        _decode_b64(key_info.get("private_key"), "private_key"),
    )
    try:
        address = await wallet.import_key(info)
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"address": address})


@docs(tags=["wallet"], summary="Sign a message with the owning wallet backend")
@match_info_schema(AddressMatchInfoSchema())
@request_schema(SignRequestSchema())
@response_schema(SignatureResultSchema(), 200, description="")
async def wallet_sign(request: web.BaseRequest):
    """Request handler for signing a message."""
    wallet = _wallet(request)
    address = request.match_info["address"]
    body = await request.json()
    meta = body.get("meta") or {}
    msg_meta = MsgMeta(
        type=meta.get("type") or MsgMeta().type,
        extra=_decode_b64(meta.get("extra"), "meta.extra"),
    )
    message = _decode_b64(body.get("message"), "message")
    try:
        signature = await wallet.sign(address, message, msg_meta)
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"signature": format_signature(signature)})


@docs(tags=["wallet"], summary="Export key material")
@match_info_schema(AddressMatchInfoSchema())
@request_schema(PassphraseSchema())
@response_schema(KeyInfoResultSchema(), 200, description="")
async def wallet_export_key(request: web.BaseRequest):
    """Request handler for exporting a key."""
    wallet = _wallet(request)
    address = request.match_info["address"]
    body = await request.json()
    try:
        key_info = await wallet.export(address, body.get("passphrase") or "")
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"key_info": format_key_info(key_info)})


@docs(tags=["wallet"], summary="Delete a key from every wallet backend owning it")
@match_info_schema(AddressMatchInfoSchema())
@request_schema(PassphraseSchema())
@response_schema(WalletModuleResponseSchema(), 200, description="")
async def wallet_delete_key(request: web.BaseRequest):
    """Request handler for deleting a key."""
    wallet = _wallet(request)
    address = request.match_info["address"]
    body = await request.json()
    try:
        await wallet.delete(address, body.get("passphrase") or "")
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({})


@docs(tags=["wallet"], summary="Sign with a local key using an explicit passphrase")
@match_info_schema(AddressMatchInfoSchema())
@request_schema(SignWithPassphraseSchema())
@response_schema(SignatureResultSchema(), 200, description="")
async def wallet_sign_with_passphrase(request: web.BaseRequest):
    """Request handler for signing with an explicit passphrase."""
    wallet = _wallet(request)
    address = request.match_info["address"]
    body = await request.json()
    message = _decode_b64(body.get("message"), "message")
    try:
        signature = await wallet.sign_with_passphrase(
            address, message, body.get("passphrase") or ""
        )
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"signature": format_signature(signature)})


@docs(tags=["wallet"], summary="Change the local keystore passphrase")
@request_schema(ChangePassphraseSchema())
@response_schema(BoolResultSchema(), 200, description="")
async def wallet_change_passphrase(request: web.BaseRequest):
    """Request handler for changing the keystore passphrase."""
    wallet = _wallet(request)
    body = await request.json()
    try:
        result = await wallet.change_passphrase(body.get("new_passphrase"))
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"result": result})


@docs(tags=["wallet"], summary="Clear the local keystore passphrase")
@response_schema(BoolResultSchema(), 200, description="")
async def wallet_clear_passphrase(request: web.BaseRequest):
    """Request handler for clearing the keystore passphrase."""
    wallet = _wallet(request)
    try:
        result = await wallet.clear_passphrase()
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"result": result})


@docs(tags=["wallet"], summary="Fetch the local keystore lock status")
@response_schema(LockStatusSchema(), 200, description="")
async def wallet_lock_status(request: web.BaseRequest):
    """Request handler for the keystore lock status."""
    wallet = _wallet(request)
    try:
        locked = await wallet.is_locked()
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"locked": locked})


@docs(tags=["wallet"], summary="Lock the local keystore")
@response_schema(LockStatusSchema(), 200, description="")
async def wallet_lock(request: web.BaseRequest):
    """Request handler for locking the keystore."""
    wallet = _wallet(request)
    try:
        await wallet.lock()
        locked = await wallet.is_locked()
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"locked": locked})


@docs(tags=["wallet"], summary="Unlock the local keystore")
@request_schema(PassphraseSchema())
@response_schema(LockStatusSchema(), 200, description="")
async def wallet_unlock(request: web.BaseRequest):
    """Request handler for unlocking the keystore."""
    wallet = _wallet(request)
    body = await request.json()
    try:
        await wallet.unlock(body.get("passphrase") or "")
        locked = await wallet.is_locked()
    except WalletError as err:
        raise wallet_http_error(err) from err
    return web.json_response({"locked": locked})


async def register(app: web.Application):
    """Register routes."""

    app.add_routes(
        [
            web.post("/wallet/keys", wallet_create_key),
            web.get("/wallet/keys", wallet_list_keys, allow_head=False),
            web.post("/wallet/keys/import", wallet_import_key),
            web.get("/wallet/keys/{address}", wallet_has_key, allow_head=False),
            web.post("/wallet/keys/{address}/sign", wallet_sign),
            web.post("/wallet/keys/{address}/export", wallet_export_key),
            web.post("/wallet/keys/{address}/delete", wallet_delete_key),
            web.post(
                "/wallet/keys/{address}/sign-with-passphrase",
                wallet_sign_with_passphrase,
            ),
            web.post("/wallet/passphrase", wallet_change_passphrase),
            web.delete("/wallet/passphrase", wallet_clear_passphrase),
            web.get("/wallet/lock", wallet_lock_status, allow_head=False),
            web.post("/wallet/lock", wallet_lock),
            web.post("/wallet/unlock", wallet_unlock),
        ]
    )


def post_process_routes(app: web.Application):
    """Amend swagger API."""

    # Add top-level tags description
    if "tags" not in app._state["swagger_dict"]:
        app._state["swagger_dict"]["tags"] = []
    app._state["swagger_dict"]["tags"].append(
        {
            "name": "wallet",
            "description": "Key management across local, remote and ledger wallets",
        }
    )
