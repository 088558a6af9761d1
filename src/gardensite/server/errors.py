"""Error handling pipeline.

Maps HTTPError exceptions and unexpected failures to Response objects, using
registered error handlers or plain defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from gardensite.errors import HTTPError
from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.server.negotiation import negotiate

logger = logging.getLogger("gardensite.server")


def find_error_handler(
    exc: Exception,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Callable[..., Any] | None:
    """Look up the handler for *exc*.

    Order: exact exception type, then status code (HTTP errors) or 500,
    then the exception's base classes, nearest first.
    """
    exc_type = type(exc)
    handler = error_handlers.get(exc_type)
    if handler is not None:
        return handler

    status = exc.status if isinstance(exc, HTTPError) else 500
    handler = error_handlers.get(status)
    if handler is not None:
        return handler

    for base in exc_type.__mro__[1:]:
        handler = error_handlers.get(base)
        if handler is not None:
            return handler
    return None


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke an error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args,
    and may be sync or async.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result)


async def render_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Response:
    """Turn *exc* into a response.

    A registered handler wins; its result keeps the exception's status unless
    it chose one itself. Without a handler, HTTP errors render their detail
    as plain text and anything else becomes a bare 500.
    """
    status = exc.status if isinstance(exc, HTTPError) else 500
    if isinstance(exc, HTTPError):
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = find_error_handler(exc, error_handlers)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(status)
    elif isinstance(exc, HTTPError):
        response = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
    else:
        response = Response(body="Internal Server Error", status=500)

    if isinstance(exc, HTTPError):
        for name, value in exc.headers:
            if not response.has_header(name):
                response = response.with_header(name, value)
    return response
