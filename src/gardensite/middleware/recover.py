"""Crash recovery middleware.

The single safety net of the pipeline: any exception raised below it becomes
a response instead of escaping to the server.
"""

import logging
from collections.abc import Awaitable, Callable

from gardensite.errors import HTTPError
from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next

logger = logging.getLogger("gardensite.server")

type ErrorRenderer = Callable[[Request, Exception], Awaitable[Response]]


async def _plain_error(request: Request, exc: Exception) -> Response:
    if isinstance(exc, HTTPError):
        resp = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
        for name, value in exc.headers:
            resp = resp.with_header(name, value)
        return resp
    return Response(body="Internal Server Error", status=500)


class RecoverMiddleware:
    """Convert exceptions from the inner chain into error responses.

    ``HTTPError`` is an expected outcome and is rendered quietly; anything
    else is logged with its traceback first. Rendering is delegated to
    *render*, usually ``App.render_error`` so registered error handlers
    apply::

        app.add_middleware(RecoverMiddleware(app.render_error))
    """

    __slots__ = ("_render",)

    def __init__(self, render: ErrorRenderer | None = None) -> None:
        self._render = render or _plain_error

    async def __call__(self, request: Request, next: Next) -> Response:
        try:
            return await next(request)
        except HTTPError as exc:
            return await self._render(request, exc)
        except Exception as exc:
            logger.exception("Recovered from error in %s %s", request.method, request.path)
            return await self._render(request, exc)
