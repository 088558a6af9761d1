"""Return-value negotiation: maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

from typing import Any

from gardensite.errors import ConfigurationError
from gardensite.http.response import HTML, Response


def negotiate(value: Any) -> Response:
    """Convert a route or error handler's return value to a Response.

    1. ``Response``        -> pass through
    2. ``str``             -> 200, text/html
    3. ``dict`` / ``list`` -> 200, application/json
    """
    match value:
        case Response():
            return value
        case str():
            return Response(body=value, content_type=HTML)
        case dict() | list():
            return Response.json(value)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a Response, str, dict, or list."
            )
            raise ConfigurationError(msg)
