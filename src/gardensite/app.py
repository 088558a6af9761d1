"""The App: registration during setup, a frozen pipeline while serving.

Routes, middleware and error handlers are collected first. The first
request (or lifespan startup, or ``run()``) compiles them into a router and a
middleware pipeline; after that the App refuses changes.
"""

import logging
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gardensite._internal.asgi import Receive, Scope, Send
from gardensite._internal.types import ErrorHandler, Handler
from gardensite.config import SiteConfig
from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Middleware, Next
from gardensite.middleware.static import StaticFiles
from gardensite.routing.route import Route
from gardensite.routing.router import Router
from gardensite.server.errors import render_error
from gardensite.server.handler import build_pipeline, handle_request
from gardensite.server.sender import send_response
from gardensite.server.shutdown import SHUTDOWN_TIMEOUT, ShutdownCoordinator, ShutdownTimeout

logger = logging.getLogger("gardensite.server")

# Answer for requests that arrive after draining has begun
SHUTTING_DOWN = Response(
    body="Server is shutting down",
    status=503,
    content_type="text/plain; charset=utf-8",
    headers=(("Connection", "close"), ("Retry-After", "5")),
)


@dataclass(slots=True)
class _PendingRoute:
    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """ASGI application for the site.

    ``shutdown_response`` is sent, without entering the pipeline, to requests
    that arrive once draining has begun. Replace it during setup to decorate
    the refusal (the site adds its security headers).

    Thread safety:
        Setup is single-threaded. Compilation happens once, under a lock
        with a double check, however many requests race to trigger it.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "_pending_routes",
        "_pipeline",
        "_router",
        "_shutdown",
        "config",
        "shutdown_response",
    )

    def __init__(self, config: SiteConfig | None = None) -> None:
        self.config: SiteConfig = config or SiteConfig()
        self.shutdown_response: Response = SHUTTING_DOWN
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._shutdown = ShutdownCoordinator()
        self._freeze_lock = threading.Lock()
        self._frozen = False
        self._router: Router | None = None
        self._pipeline: Next | None = None

    # -- Setup --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator binding a handler to the literal *path*.

        *methods* defaults to ``["GET"]``; every ``GET`` route also answers
        ``HEAD``. *name* only shows up in the route table. Handlers take no
        arguments or a single ``request``.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Decorator registering an error handler by status code or exception type.

        Handlers take ``()``, ``(request)`` or ``(request, exc)`` and may return
        anything a route handler may.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Append *middleware*. The first one added sees the request first."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    async def render_error(self, request: Request, exc: Exception) -> Response:
        """Turn *exc* into a response using this app's error handlers."""
        return await render_error(exc, request, self._error_handlers)

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """Compiled routes, in registration order. Freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    @property
    def shutdown(self) -> ShutdownCoordinator:
        return self._shutdown

    def print_routes(self, file: Any = None) -> None:
        """Print the route table, static mount included, to *file* or stdout."""
        from gardensite.server.routes import format_route_table

        static_url = None
        for mw in self._middleware_list:
            if isinstance(mw, StaticFiles):
                static_url = mw.prefix
                break
        (file or sys.stdout).write(format_route_table(self.routes, static_url=static_url))

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve with pounce until a shutdown signal arrives.

        Raises:
            OSError: If the listening socket can't be bound.
        """
        from gardensite.server.serve import run_server

        self._ensure_frozen()
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._pipeline is not None

        with self._shutdown.track() as accepted:
            if not accepted:
                await send_response(self.shutdown_response, send)
                return
            await handle_request(
                scope,
                receive,
                send,
                pipeline=self._pipeline,
                error_handlers=self._error_handlers,
            )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """ASGI lifespan.

        Startup compiles the app. Shutdown refuses new requests and gives
        in-flight ones up to ``SHUTDOWN_TIMEOUT`` seconds to finish; a drain
        that runs out of time is logged, not fatal.
        """
        while True:
            message = await receive()

            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif message["type"] == "lifespan.shutdown":
                logger.info("Shutting down server...")
                try:
                    await self._shutdown.drain(SHUTDOWN_TIMEOUT)
                except ShutdownTimeout as exc:
                    logger.error("Error during shutdown: %s", exc)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Compilation --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if not self._frozen:
                self._freeze()

    def _freeze(self) -> None:
        # Caller holds _freeze_lock
        router = Router()
        for pending in self._pending_routes:
            methods = {m.upper() for m in pending.methods or ["GET"]}
            if "GET" in methods:
                methods.add("HEAD")
            router.add(Route(pending.path, pending.handler, frozenset(methods), pending.name))
        router.compile()
        self._router = router
        self._pipeline = build_pipeline(
            router, tuple(self._middleware_list), self._error_handlers
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and error handlers before calling app.run()."
            )
            raise RuntimeError(msg)
