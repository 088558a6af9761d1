"""Routing: literal paths compiled into a segment trie when the app freezes."""

from gardensite.routing.route import Route
from gardensite.routing.router import Router

__all__ = ["Route", "Router"]
