"""Static file serving middleware.

Serves files from a directory for paths under a URL prefix. Anything else,
including missing files, falls through to the next handler.
"""

import mimetypes
from pathlib import Path

from gardensite.errors import HTTPError
from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next


class StaticFiles:
    """Middleware that serves static files from a directory.

    Security: resolves symlinks and ``..`` segments and verifies the final
    path is inside the configured directory; anything else is a 403.

    Usage::

        app.add_middleware(StaticFiles(directory="./static", prefix="/static"))
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._cache_control = cache_control
        self._prefix = "/" + prefix.strip("/")

    @property
    def directory(self) -> Path:
        """The resolved asset root."""
        return self._directory

    @property
    def prefix(self) -> str:
        """The URL prefix files are served under."""
        return self._prefix

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if not path.startswith(self._prefix + "/"):
            return await next(request)

        relative = path[len(self._prefix) :].lstrip("/")
        if not relative:
            return await next(request)

        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory):
            raise HTTPError(status=403, detail="Forbidden")

        if not file_path.is_file():
            return await next(request)

        try:
            body = file_path.read_bytes()
        except OSError:
            return await next(request)

        content_type, _ = mimetypes.guess_type(file_path.name)
        return Response(
            body=body,
            content_type=content_type or "application/octet-stream",
        ).with_header("Cache-Control", self._cache_control)
