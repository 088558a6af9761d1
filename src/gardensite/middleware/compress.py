"""Response compression middleware.

Compresses eligible response bodies with gzip or deflate, chosen from the
client's ``Accept-Encoding``. Purely a transport optimization: handlers never
see it.
"""

import gzip
import zlib
from dataclasses import dataclass

from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next

_COMPRESSIBLE_TYPES = (
    "text/",
    "application/json",
    "application/javascript",
    "application/xml",
    "image/svg+xml",
)


@dataclass(frozen=True, slots=True)
class CompressionConfig:
    """Compression settings.

    ``level`` follows zlib: 1 is fastest, 9 is smallest.
    """

    level: int = 1
    min_size: int = 256
    encodings: tuple[str, ...] = ("gzip", "deflate")


def _accepted_encodings(header: str | None) -> set[str]:
    """Parse ``Accept-Encoding`` into the set of codings with non-zero q."""
    if not header:
        return set()
    accepted: set[str] = set()
    for item in header.split(","):
        coding, _, params = item.strip().partition(";")
        coding = coding.strip().lower()
        if not coding:
            continue
        q = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        if q > 0:
            accepted.add(coding)
    return accepted


def _is_compressible(content_type: str) -> bool:
    return content_type.lower().startswith(_COMPRESSIBLE_TYPES)


def compress_body(body: bytes, encoding: str, level: int) -> bytes:
    """Compress *body* with the named content-coding."""
    if encoding == "gzip":
        return gzip.compress(body, compresslevel=level)
    if encoding == "deflate":
        return zlib.compress(body, level)
    msg = f"Unsupported content-coding {encoding!r}"
    raise ValueError(msg)


class CompressionMiddleware:
    """Compress textual responses for clients that accept it.

    A response is eligible when its status allows a body, it has no
    ``Content-Encoding`` yet, its content type is textual, and the body is
    at least ``min_size`` bytes.

    Usage::

        app.add_middleware(CompressionMiddleware(CompressionConfig(level=1)))
    """

    __slots__ = ("config",)

    def __init__(self, config: CompressionConfig | None = None) -> None:
        self.config = config or CompressionConfig()

    def _choose_encoding(self, request: Request) -> str | None:
        accepted = _accepted_encodings(request.headers.get("accept-encoding"))
        if "*" in accepted:
            return self.config.encodings[0] if self.config.encodings else None
        for encoding in self.config.encodings:
            if encoding in accepted:
                return encoding
        return None

    async def __call__(self, request: Request, next: Next) -> Response:
        response = await next(request)

        if not _is_compressible(response.content_type):
            return response
        if response.status < 200 or response.status in (204, 304):
            return response
        if response.has_header("content-encoding"):
            return response

        body = response.body_bytes
        if len(body) < self.config.min_size:
            return response

        # Eligible: the representation varies with Accept-Encoding either way
        response = response.with_header("Vary", "Accept-Encoding")
        encoding = self._choose_encoding(request)
        if encoding is None:
            return response

        return response.with_body(
            compress_body(body, encoding, self.config.level)
        ).with_header("Content-Encoding", encoding)
