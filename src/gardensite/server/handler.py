"""ASGI handler: translates ASGI scope/messages to gardensite types.

Converts the scope to a typed Request, dispatches through middleware and
routing, and sends the Response back through ASGI ``send()``.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from gardensite._internal.asgi import Receive, Scope, Send
from gardensite._internal.invoke import invoke
from gardensite.errors import HTTPError
from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next
from gardensite.routing.route import Route
from gardensite.routing.router import Router
from gardensite.server.errors import render_error
from gardensite.server.negotiation import negotiate
from gardensite.server.sender import send_response

logger = logging.getLogger("gardensite.server")


def build_pipeline(
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Next:
    """Wrap router dispatch in the middleware chain (first = outermost).

    A routing miss (404, 405) is rendered through *error_handlers* at the
    bottom of the chain, so the not-found page passes back out through every
    middleware like any other response.
    """

    async def dispatch(req: Request) -> Response:
        try:
            route = router.match(req.method, req.path)
        except HTTPError as exc:
            return await render_error(exc, req, error_handlers)
        return await _invoke_handler(route, req)

    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,  # noqa: ARG001  (request bodies are never read)
    send: Send,
    *,
    pipeline: Next,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    try:
        response = await pipeline(request)
    except HTTPError as exc:
        response = await render_error(exc, request, error_handlers)
    except Exception as exc:
        # Only reached when no RecoverMiddleware is installed
        logger.exception("500 %s %s", request.method, request.path)
        response = await render_error(exc, request, error_handlers)

    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(route: Route, request: Request) -> Response:
    """Call the route handler, passing ``request`` if it asks for one."""
    handler = route.handler
    params = inspect.signature(handler).parameters
    result = await (invoke(handler, request) if params else invoke(handler))
    return negotiate(result)
