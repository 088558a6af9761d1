"""Built-in middleware: CORS.

Answers preflight requests itself and marks other cross-origin responses
with the allowed origin.
"""

from dataclasses import dataclass

from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS policy.

    The defaults allow no origin at all. The site runs an open policy::

        CORSConfig(
            allow_origins=("*",),
            allow_methods=("GET", "POST", "OPTIONS"),
            allow_headers=("Origin", "Content-Type", "Accept", "Authorization"),
        )
    """

    allow_origins: tuple[str, ...] = ()
    allow_methods: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
    allow_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 0

    @property
    def wildcard(self) -> bool:
        """Whether any origin may be answered with a literal ``*``."""
        return "*" in self.allow_origins and not self.allow_credentials


class CORSMiddleware:
    """Cross-Origin Resource Sharing.

    Requests without an ``Origin``, or from an origin outside the policy,
    pass through untouched. An ``OPTIONS`` request that names
    ``Access-Control-Request-Method`` is a preflight and gets a 204 without
    reaching the router.
    """

    __slots__ = ("_preflight_headers", "config")

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()
        cfg = self.config
        preflight = [("Access-Control-Allow-Methods", ",".join(cfg.allow_methods))]
        if cfg.allow_headers:
            preflight.append(("Access-Control-Allow-Headers", ",".join(cfg.allow_headers)))
        if cfg.max_age > 0:
            preflight.append(("Access-Control-Max-Age", str(cfg.max_age)))
        self._preflight_headers = tuple(preflight)

    def _allows(self, origin: str) -> bool:
        return "*" in self.config.allow_origins or origin in self.config.allow_origins

    def _mark(self, response: Response, origin: str) -> Response:
        cfg = self.config
        if cfg.wildcard:
            response = response.with_header("Access-Control-Allow-Origin", "*")
        else:
            response = response.with_header("Access-Control-Allow-Origin", origin).with_header(
                "Vary", "Origin"
            )
        if cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Credentials", "true")
        if cfg.expose_headers:
            response = response.with_header(
                "Access-Control-Expose-Headers", ", ".join(cfg.expose_headers)
            )
        return response

    async def __call__(self, request: Request, next: Next) -> Response:
        origin = request.headers.get("origin")
        if origin is None or not self._allows(origin):
            return await next(request)

        if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
            preflight = self._mark(Response(body="", status=204), origin)
            return preflight.with_headers(dict(self._preflight_headers))

        return self._mark(await next(request), origin)
