"""Request logging middleware.

Writes one access line per request: status, latency, client, method, path.
"""

import logging
import time

from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next

logger = logging.getLogger("gardensite.access")


def _format_latency(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:.0f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.2f}ms"
    return f"{seconds:.2f}s"


class RequestLoggerMiddleware:
    """Log every request after the inner chain has produced a response.

    Usage::

        app.add_middleware(RequestLoggerMiddleware())
    """

    __slots__ = ("_logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        try:
            response = await next(request)
        except Exception:
            self._log(request, 500, time.perf_counter() - start)
            raise
        self._log(request, response.status, time.perf_counter() - start)
        return response

    def _log(self, request: Request, status: int, elapsed: float) -> None:
        self._logger.info(
            "%d | %s | %s | %s | %s",
            status,
            _format_latency(elapsed),
            request.client_ip,
            request.method,
            request.path,
        )
