"""Serve an App with the pounce ASGI server.

pounce owns the socket, signal handling (SIGINT/SIGTERM), and the ASGI
lifespan; the App's lifespan shutdown drains in-flight requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gardensite.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    log_level: str = "info",
) -> None:
    """Start a single-worker pounce server for *app*. Blocks until shutdown.

    pounce's ``run()`` takes an import string, but we hold a live ``App``,
    so ``pounce.Server`` is driven directly with the ASGI callable.

    Raises:
        OSError: If the listening socket cannot be bound.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=False,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
