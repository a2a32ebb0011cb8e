"""Network signing service implementation of the wallet backend."""

import asyncio
import logging
from typing import Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from .base import BaseWalletBackend
from .error import (
    KeyNotFoundError,
    UnsupportedOperationError,
    WalletError,
    WalletLockedError,
)
from .key_info import KeyInfo, MsgMeta, Signature
from .key_type import KeyType, KeyTypes
from .util import b64_to_bytes, bytes_to_b64

LOGGER = logging.getLogger(__name__)


class RemoteWallet(BaseWalletBackend):
    """Client for a wallet service exposing the multiwallet admin API.

    Each call makes a single attempt; transport failures and timeouts surface
    as `WalletError`.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: str = None,
        timeout: float = 10.0,
        session: ClientSession = None,
        key_types: KeyTypes = None,
    ):
        """
        Initialize a `RemoteWallet` instance.

        Args:
            endpoint: Base URL of the wallet service
            api_key: Value sent in the `X-API-Key` header
            timeout: Request timeout, in seconds
            session: A shared ClientSession, otherwise one is created on demand
            key_types: Registry used to resolve key type identifiers

        """
        self.endpoint = endpoint.rstrip("/")
        self._api_key = api_key
        self._timeout = ClientTimeout(total=timeout)
        self._session = session
        self._session_owner = session is None
        self._key_types = key_types or KeyTypes()

    def _get_session(self) -> ClientSession:
        if not self._session:
            self._session = ClientSession(trust_env=True)
        return self._session

    async def close(self):
        """Close the HTTP session if this client created it."""
        if self._session and self._session_owner:
            await self._session.close()
            self._session = None

    async def _request(self, method: str, path: str, body: dict = None) -> dict:
        headers = {}
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        url = f"{self.endpoint}{path}"
        LOGGER.debug("Remote wallet request: %s %s", method, url)
        try:
            async with self._get_session().request(
                method, url, json=body, headers=headers, timeout=self._timeout
            ) as response:
                if response.status == 404:
                    raise KeyNotFoundError(await self._reason(response))
                if response.status == 501:
                    raise UnsupportedOperationError(await self._reason(response))
                if response.status == 403:
                    raise WalletLockedError(await self._reason(response))
                if response.status < 200 or response.status >= 300:
                    raise WalletError(
                        f"Bad response from remote wallet: {response.status} - "
                        f"{await self._reason(response)}"
                    )
                return await response.json()
        except (ClientError, asyncio.TimeoutError) as err:
            raise WalletError(f"Remote wallet unreachable: {url}") from err
        except ValueError as err:
            raise WalletError(f"Malformed response from remote wallet: {url}") from err

    @staticmethod
    async def _reason(response) -> str:
        try:
            body = await response.json()
        except (ClientError, ValueError):
            return response.reason
        return body.get("reason") or response.reason

    def _key_type(self, key_type: str) -> KeyType:
        resolved = self._key_types.from_key_type(key_type)
        if not resolved:
            raise WalletError(f"Remote wallet returned unknown key type: {key_type}")
        return resolved

    async def new(self, key_type: KeyType) -> str:
        """Create a key in the remote wallet."""
        result = await self._request(
            "POST", "/wallet/keys", {"key_type": key_type.key_type}
        )
        return result["address"]

    async def has(self, address: str) -> bool:
        """Check whether the remote wallet owns a key."""
        result = await self._request("GET", f"/wallet/keys/{address}")
        return bool(result["has"])

    async def list(self) -> Sequence[str]:
        """List the addresses of the remote wallet."""
        result = await self._request("GET", "/wallet/keys")
        return result["results"]

    async def sign(self, address: str, message: bytes, meta: MsgMeta) -> Signature:
        """Sign a message with a remote key."""
        result = await self._request(
            "POST",
            f"/wallet/keys/{address}/sign",
            {
                "message": bytes_to_b64(message),
                "meta": {"type": meta.type, "extra": bytes_to_b64(meta.extra)},
            },
        )
        signature = result["signature"]
        return Signature(
            self._key_type(signature["key_type"]), b64_to_bytes(signature["data"])
        )

    async def export(self, address: str, passphrase: str) -> KeyInfo:
        """Export a remote key."""
        result = await self._request(
            "POST", f"/wallet/keys/{address}/export", {"passphrase": passphrase}
        )
        key_info = result["key_info"]
        return KeyInfo(
            self._key_type(key_info["key_type"]),
            b64_to_bytes(key_info["private_key"]),
        )

    async def import_key(self, key_info: KeyInfo) -> str:
        """Import key material into the remote wallet."""
        result = await self._request(
            "POST",
            "/wallet/keys/import",
            {
                "key_info": {
                    "key_type": key_info.key_type.key_type,
                    "private_key": bytes_to_b64(key_info.private_key),
                }
            },
        )
        return result["address"]

    async def delete(self, address: str, passphrase: str) -> None:
        """Delete a remote key."""
        await self._request(
            "POST", f"/wallet/keys/{address}/delete", {"passphrase": passphrase}
        )

    def __repr__(self) -> str:
        """Get a human readable string."""
        return "<RemoteWallet(endpoint={})>".format(self.endpoint)
