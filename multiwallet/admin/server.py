"""Admin server classes."""

import asyncio
from hmac import compare_digest
import logging
from typing import Coroutine

from aiohttp import web
from aiohttp_apispec import (
    docs,
    response_schema,
    setup_aiohttp_apispec,
    validation_middleware,
)
import aiohttp_cors
from marshmallow import fields

from ..config.base import BaseSettings
from ..version import __version__
from ..wallet import routes as wallet_routes
from ..wallet.key_type import KeyTypes
from ..wallet.multi import MultiWallet
from .error import AdminSetupError
from .openapi import OpenAPISchema

LOGGER = logging.getLogger(__name__)

REDACTED_SETTINGS = (
    "admin.admin_api_key",
    "wallet.local.passphrase",
    "wallet.remote.api_key",
)


class AdminStatusSchema(OpenAPISchema):
    """Schema for the status endpoint."""

    version = fields.Str(metadata={"description": "Version code"})
    backends = fields.Dict(
        keys=fields.Str(),
        values=fields.Bool(),
        metadata={"description": "Configured wallet backends"},
    )


class AdminConfigSchema(OpenAPISchema):
    """Schema for the config endpoint."""

    config = fields.Dict(metadata={"description": "Configuration settings"})


class AdminStatusLivelinessSchema(OpenAPISchema):
    """Schema for the liveliness endpoint."""

    alive = fields.Boolean(
        metadata={"description": "Liveliness status", "example": True}
    )


class AdminStatusReadinessSchema(OpenAPISchema):
    """Schema for the readiness endpoint."""

    ready = fields.Boolean(
        metadata={"description": "Readiness status", "example": True}
    )


class AdminShutdownSchema(OpenAPISchema):
    """Response schema for admin Module."""


@web.middleware
async def ready_middleware(request: web.BaseRequest, handler: Coroutine):
    """Only continue if application is ready to take work."""

    if str(request.rel_url).rstrip("/") in (
        "/status/live",
        "/status/ready",
    ) or request.app._state.get("ready"):
        try:
            return await handler(request)
        except web.HTTPFound as e:
            # redirect, typically / -> /api/doc
            LOGGER.info("Handler redirect to: %s", e.location)
            raise
        except asyncio.CancelledError:
            LOGGER.debug("Task cancelled")
            raise
        except web.HTTPException:
            raise
        except Exception as e:
            LOGGER.exception("Handler error with exception: %s", str(e))
            raise

    raise web.HTTPServiceUnavailable(reason="Shutdown in progress")


@web.middleware
async def debug_middleware(request: web.BaseRequest, handler: Coroutine):
    """Show request detail in debug log."""

    if LOGGER.isEnabledFor(logging.DEBUG):
        LOGGER.debug(f"Incoming request: {request.method} {request.path_qs}")
        LOGGER.debug(f"Match info: {request.match_info}")

    return await handler(request)


def const_compare(string1, string2):
    """Compare two strings in constant time."""
    if string1 is None or string2 is None:
        return False
    return compare_digest(string1.encode(), string2.encode())


class AdminServer:
    """Admin HTTP server exposing the wallet router."""

    def __init__(
        self,
        host: str,
        port: int,
        settings: BaseSettings,
        wallet: MultiWallet,
        stop_callback: Coroutine = None,
        key_types: KeyTypes = None,
    ):
        """
        Initialize an AdminServer instance.

        Args:
            host: Host to listen on
            port: Port to listen on
            settings: The application settings
            wallet: The wallet router served by the API
            stop_callback: Graceful stop for the shutdown API call
            key_types: Registry resolving key type identifiers in requests
        """
        self.app = None
        self.admin_api_key = settings.get("admin.admin_api_key")
        self.admin_insecure_mode = bool(settings.get("admin.admin_insecure_mode"))
        self.host = host
        self.port = port
        self.settings = settings
        self.wallet = wallet
        self.stop_callback = stop_callback
        self.key_types = key_types or KeyTypes()
        self.site = None

    async def make_application(self) -> web.Application:
        """Get the aiohttp application instance."""

        middlewares = [ready_middleware, debug_middleware, validation_middleware]

        # admin-token and admin-token are mutually exclusive and required.
        if not (self.admin_insecure_mode ^ bool(self.admin_api_key)):
            raise AdminSetupError(
                "Either an admin API key or insecure mode must be configured"
            )

        def is_unprotected_path(path: str):
            return path in [
                "/api/doc",
                "/api/docs/swagger.json",
                "/favicon.ico",
                "/status/live",
                "/status/ready",
            ] or path.startswith("/static/swagger/")

        # If admin_api_key is None, then admin_insecure_mode must be set so
        # we can safely enable the admin server with no security
        if self.admin_api_key:

            @web.middleware
            async def check_token(request: web.Request, handler):
                header_admin_api_key = request.headers.get("x-api-key")
                valid_key = const_compare(self.admin_api_key, header_admin_api_key)

                # Browsers never send the x-api-key header on CORS preflight
                # OPTIONS requests.
                if (
                    valid_key
                    or is_unprotected_path(request.path)
                    or (request.method == "OPTIONS")
                ):
                    return await handler(request)
                else:
                    raise web.HTTPUnauthorized()

            middlewares.append(check_token)

        app = web.Application(
            middlewares=middlewares,
            client_max_size=(
                self.settings.get("admin.admin_client_max_request_size", 1)
                * 1024
                * 1024
            ),
        )
        app["wallet"] = self.wallet
        app["key_types"] = self.key_types

        app.add_routes(
            [
                web.get("/", self.redirect_handler, allow_head=True),
                web.get("/status", self.status_handler, allow_head=False),
                web.get("/status/config", self.config_handler, allow_head=False),
                web.get("/status/live", self.liveliness_handler, allow_head=False),
                web.get("/status/ready", self.readiness_handler, allow_head=False),
                web.get("/shutdown", self.shutdown_handler, allow_head=False),
            ]
        )
        await wallet_routes.register(app)

        cors = aiohttp_cors.setup(
            app,
            defaults={
                "*": aiohttp_cors.ResourceOptions(
                    allow_credentials=True,
                    expose_headers="*",
                    allow_headers="*",
                    allow_methods="*",
                )
            },
        )
        for route in app.router.routes():
            cors.add(route)

        setup_aiohttp_apispec(
            app=app,
            title="multiwallet",
            version=f"v{__version__}",
            swagger_path="/api/doc",
        )
        app.on_startup.append(self.on_startup)

        # ensure we always have status values
        app._state["ready"] = False
        app._state["alive"] = False

        return app

    async def start(self) -> None:
        """
        Start the webserver.

        Raises:
            AdminSetupError: If there was an error starting the webserver

        """
        self.app = await self.make_application()
        runner = web.AppRunner(self.app)
        await runner.setup()

        wallet_routes.post_process_routes(self.app)

        # order tags alphabetically
        swagger_dict = self.app._state["swagger_dict"]
        swagger_dict.get("tags", []).sort(key=lambda t: t["name"])

        self.site = web.TCPSite(runner, host=self.host, port=self.port)

        try:
            await self.site.start()
            self.app._state["ready"] = True
            self.app._state["alive"] = True
        except OSError:
            raise AdminSetupError(
                "Unable to start webserver with host "
                + f"'{self.host}' and port '{self.port}'\n"
            )
        LOGGER.info("Admin server listening on %s:%s", self.host, self.port)

    async def stop(self) -> None:
        """Stop the webserver."""
        if self.app:
            self.app._state["ready"] = False
        if self.site:
            await self.site.stop()
            self.site = None

    async def on_startup(self, app: web.Application):
        """Perform webserver startup actions."""
        if self.admin_api_key:
            swagger = app["swagger_dict"]
            swagger["securityDefinitions"] = {
                "ApiKeyHeader": {"type": "apiKey", "in": "header", "name": "X-API-KEY"}
            }
            swagger["security"] = [{"ApiKeyHeader": []}]

    @docs(tags=["server"], summary="Fetch the server configuration")
    @response_schema(AdminConfigSchema(), 200, description="")
    async def config_handler(self, request: web.BaseRequest):
        """
        Request handler for the server configuration.

        Secrets are left out of the response.

        Args:
            request: aiohttp request object

        Returns:
            The web response

        """
        return web.json_response({"config": self.settings.without(*REDACTED_SETTINGS)})

    @docs(tags=["server"], summary="Fetch the server status")
    @response_schema(AdminStatusSchema(), 200, description="")
    async def status_handler(self, request: web.BaseRequest):
        """
        Request handler for the server status information.

        Args:
            request: aiohttp request object

        Returns:
            The web response

        """
        return web.json_response(
            {"version": __version__, "backends": self.wallet.configured()}
        )

    async def redirect_handler(self, request: web.BaseRequest):
        """Perform redirect to documentation."""
        raise web.HTTPFound("/api/doc")

    @docs(tags=["server"], summary="Liveliness check")
    @response_schema(AdminStatusLivelinessSchema(), 200, description="")
    async def liveliness_handler(self, request: web.BaseRequest):
        """
        Request handler for liveliness check.

        Args:
            request: aiohttp request object

        Returns:
            The web response, always indicating True

        """
        app_live = self.app._state["alive"]
        if app_live:
            return web.json_response({"alive": app_live})
        else:
            raise web.HTTPServiceUnavailable(reason="Service not available")

    @docs(tags=["server"], summary="Readiness check")
    @response_schema(AdminStatusReadinessSchema(), 200, description="")
    async def readiness_handler(self, request: web.BaseRequest):
        """
        Request handler for readiness check.

        Args:
            request: aiohttp request object

        Returns:
            The web response, indicating readiness for further calls

        """
        app_ready = self.app._state["ready"] and self.app._state["alive"]
        if app_ready:
            return web.json_response({"ready": app_ready})
        else:
            raise web.HTTPServiceUnavailable(reason="Service not ready")

    @docs(tags=["server"], summary="Shut down server")
    @response_schema(AdminShutdownSchema(), description="")
    async def shutdown_handler(self, request: web.BaseRequest):
        """
        Request handler for server shutdown.

        Args:
            request: aiohttp request object

        Returns:
            The web response (empty production)

        """
        self.app._state["ready"] = False
        if self.stop_callback:
            asyncio.ensure_future(self.stop_callback())

        return web.json_response({})
