"""The Knowledge Garden CLI marketing site.

Wires the middleware chain, the page routes, and error conversion onto an
App. Pages are static HTML files under ``templates/``; assets live under
``static/``.
"""

from http import HTTPStatus
from pathlib import Path

from gardensite.app import App
from gardensite.config import SiteConfig
from gardensite.errors import HTTPError
from gardensite.http.request import Request
from gardensite.http.response import HTML, Response
from gardensite.middleware import (
    CompressionConfig,
    CompressionMiddleware,
    CORSConfig,
    CORSMiddleware,
    RateLimitConfig,
    RateLimitMiddleware,
    RecoverMiddleware,
    RequestLoggerMiddleware,
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
    StaticFiles,
)
from gardensite.pages import PageLoader

# URL path -> document under the templates directory
PAGES: dict[str, str] = {
    "/": "index.html",
    "/tutorial": "tutorial.html",
    "/tutorial/self-hosting": "tutorial-self-hosting.html",
    "/tutorial/cli-reference": "tutorial-cli-reference.html",
}

NOT_FOUND_PAGE = "404.html"
NOT_FOUND_FALLBACK = "404 - Page Not Found"
TEMPLATE_MISSING = "Template not found"

CORS = CORSConfig(
    allow_origins=("*",),
    allow_methods=("GET", "POST", "OPTIONS"),
    allow_headers=("Origin", "Content-Type", "Accept", "Authorization"),
)


def create_app(
    config: SiteConfig | None = None,
    workdir: str | Path | None = None,
    *,
    rate_limiter: RateLimitMiddleware | None = None,
) -> App:
    """Build the site.

    Args:
        config: Site configuration. Defaults to ``SiteConfig()``.
        workdir: Directory holding ``templates/`` and ``static/``. Defaults
            to the current working directory.
        rate_limiter: Replacement rate limit middleware (tests pass one with
            a fake clock).
    """
    config = config or SiteConfig()
    static_root, templates_root = config.resolve_paths(workdir or Path.cwd())
    pages = PageLoader(templates_root, cache=config.page_cache)

    app = App(config)
    security = SecurityHeadersMiddleware(SecurityHeadersConfig(app_version=config.version))

    # Both are built outside the security layer
    app.shutdown_response = security.apply(app.shutdown_response)

    async def render_error(request: Request, exc: Exception) -> Response:
        return security.apply(await app.render_error(request, exc))

    # Order matters: first added = outermost
    app.add_middleware(RequestLoggerMiddleware())
    app.add_middleware(RecoverMiddleware(render_error))
    app.add_middleware(
        CompressionMiddleware(
            CompressionConfig(
                level=config.compression_level,
                min_size=config.compression_min_size,
            )
        )
    )
    app.add_middleware(CORSMiddleware(CORS))
    app.add_middleware(security)
    app.add_middleware(
        rate_limiter
        or RateLimitMiddleware(
            RateLimitConfig(
                requests=config.rate_limit_requests,
                window_seconds=config.rate_limit_window,
            )
        )
    )
    app.add_middleware(
        StaticFiles(
            static_root,
            prefix=config.static_url,
            cache_control=config.static_cache_control,
        )
    )

    @app.route("/health", name="health")
    def health():
        return {"status": "healthy", "version": config.version, "app": config.app_name}

    for path, document in PAGES.items():
        app.route(path)(_page_handler(pages, document))

    def not_found(request: Request) -> Response:
        body = pages.read(NOT_FOUND_PAGE)
        if body is None:
            return Response(body=NOT_FOUND_FALLBACK, status=404, content_type=HTML)
        return Response(body=body, status=404, content_type=HTML)

    app.error(404)(not_found)
    app.error(405)(not_found)

    @app.error(Exception)
    def json_error(request: Request, exc: Exception) -> Response:
        if isinstance(exc, HTTPError):
            message = exc.detail or _status_phrase(exc.status)
            return Response.json({"error": message}, status=exc.status)
        message = str(exc) if config.debug and str(exc) else "Internal Server Error"
        return Response.json({"error": message}, status=500)

    return app


def _page_handler(pages: PageLoader, document: str):
    """Build a handler that serves *document* verbatim, re-read per request."""

    def page() -> Response:
        body = pages.read(document)
        if body is None:
            return Response(body=TEMPLATE_MISSING, status=404, content_type=HTML)
        return Response(body=body, content_type=HTML)

    page.__name__ = f"page[{document}]"
    return page


def _status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Error {status}"
