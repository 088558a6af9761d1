"""Exceptions raised by gardensite.

``HTTPError`` and its subclasses are expected outcomes (a missing page, a
forbidden path) and become responses. ``ConfigurationError`` is a startup
failure and ends the process.
"""

from dataclasses import dataclass


class SiteError(Exception):
    """Root of the gardensite exception tree."""


class ConfigurationError(SiteError):
    """Bad environment or bad app setup, detected before serving."""


@dataclass(frozen=True, slots=True)
class HTTPError(SiteError):
    """A request outcome with an HTTP status.

    ``headers`` are added to whatever response the error is rendered into,
    unless that response already set them.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return f"{self.status}: {self.detail}" if self.detail else str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing is routed at this path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the path is routed, the method isn't. Sets ``Allow``."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow}",
            headers=(("Allow", allow),),
        )
