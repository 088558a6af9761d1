"""gardensite: the Knowledge Garden CLI marketing site.

A small ASGI app that serves pre-authored HTML pages and static assets
behind a fixed middleware chain.

Basic usage::

    from gardensite import SiteConfig, create_app

    app = create_app(SiteConfig.from_env())
    app.run()

Or from a shell: ``python -m gardensite``.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "SiteConfig",
    "SiteError",
    "create_app",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import gardensite`` fast while providing a clean top-level API.
    """
    if name == "App":
        from gardensite.app import App

        return App

    if name == "SiteConfig":
        from gardensite.config import SiteConfig

        return SiteConfig

    if name == "create_app":
        from gardensite.site import create_app

        return create_app

    if name == "Request":
        from gardensite.http.request import Request

        return Request

    if name == "Response":
        from gardensite.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from gardensite.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound", "SiteError"):
        from gardensite import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
