"""Immutable HTTP request.

The site never reads request bodies or query strings, so the request is
method, path, headers, and the peer address.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from gardensite.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request, built once from the ASGI scope."""

    method: str
    path: str
    headers: Headers
    client: tuple[str, int] | None = None

    @property
    def client_ip(self) -> str:
        """The peer address, or ``"unknown"`` when the server didn't report one."""
        if self.client:
            return self.client[0]
        return "unknown"

    @classmethod
    def from_asgi(cls, scope: dict[str, Any] | Any) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            client=tuple(client) if client else None,
        )
