"""Route definition."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Route:
    """A handler bound to a literal path and a set of methods."""

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
