"""Security headers middleware.

Sets a fixed group of response headers on every response: MIME sniffing,
framing, legacy XSS filter, referrer leakage, permissions, and the running
application version.
"""

from dataclasses import dataclass, replace

from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Values for the security headers. Applied as-is."""

    app_version: str = "dev"
    x_content_type_options: str = "nosniff"
    x_frame_options: str = "DENY"
    x_xss_protection: str = "1; mode=block"
    referrer_policy: str = "strict-origin-when-cross-origin"
    permissions_policy: str = "default-src 'self'"

    def as_headers(self) -> tuple[tuple[str, str], ...]:
        """The headers in the order they are written."""
        return (
            ("X-Content-Type-Options", self.x_content_type_options),
            ("X-Frame-Options", self.x_frame_options),
            ("X-XSS-Protection", self.x_xss_protection),
            ("Referrer-Policy", self.referrer_policy),
            ("Permissions-Policy", self.permissions_policy),
            ("X-Application-Version", self.app_version),
        )


class SecurityHeadersMiddleware:
    """Add the security headers to every response.

    No per-route or per-content-type variation: HTML pages, JSON errors,
    static assets and rate-limit rejections all carry them. Any value a
    handler already set for one of these headers is replaced. Responses built
    further out in the chain (error pages from the recover middleware) can be
    stamped with ``apply()``.

    Usage::

        app.add_middleware(SecurityHeadersMiddleware(
            SecurityHeadersConfig(app_version="1.4.0"),
        ))
    """

    __slots__ = ("_headers", "_names", "config")

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()
        self._headers = self.config.as_headers()
        self._names = frozenset(name.lower() for name, _ in self._headers)

    def apply(self, response: Response) -> Response:
        """Return *response* with the security headers set, replacing old values."""
        kept = tuple(
            (name, value) for name, value in response.headers if name.lower() not in self._names
        )
        return replace(response, headers=(*kept, *self._headers))

    async def __call__(self, request: Request, next: Next) -> Response:
        return self.apply(await next(request))
