"""Segment trie router.

Paths are split on ``/`` and stored in a tree keyed by segment. Every route
is a literal path; there are no parameters. Empty segments are ignored, so
``/tutorial/`` and ``/tutorial`` are the same route.
"""

from gardensite.errors import ConfigurationError, MethodNotAllowed, NotFound
from gardensite.routing.route import Route


def split_path(path: str) -> list[str]:
    """Split a request or route path into its non-empty segments.

    ``"/"`` has no segments.
    """
    return [part for part in path.split("/") if part]


def parse_path(path: str) -> list[str]:
    """Split a route pattern, rejecting placeholder segments.

    Raises:
        ConfigurationError: If a segment looks like ``{param}``.
    """
    segments = split_path(path)
    for segment in segments:
        if segment.startswith("{") and segment.endswith("}"):
            msg = f"Path parameters are not supported: {segment!r} in route {path!r}"
            raise ConfigurationError(msg)
    return segments


class _Node:
    __slots__ = ("children", "methods")

    def __init__(self) -> None:
        self.children: dict[str, _Node] = {}
        self.methods: dict[str, Route] = {}


class Router:
    """Method-aware path router.

    Usage::

        router = Router()
        router.add(Route("/tutorial", handler, frozenset({"GET"})))
        router.compile()
        route = router.match("GET", "/tutorial")
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._routes: list[Route] = []
        self._compiled = False

    @property
    def routes(self) -> list[Route]:
        """Registered routes in the order they were added."""
        return list(self._routes)

    def add(self, route: Route) -> None:
        """Insert *route*. Not allowed once compiled."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        node = self._root
        for segment in parse_path(route.path):
            node = node.children.setdefault(segment, _Node())
        self._routes.append(route)
        node.methods.update(dict.fromkeys(route.methods, route))

    def compile(self) -> None:
        """Seal the router."""
        self._compiled = True

    def match(self, method: str, path: str) -> Route:
        """Resolve *method* and *path* to a route.

        Raises:
            NotFound: No route has this path.
            MethodNotAllowed: The path is routed, but not for *method*.
        """
        node = self._root
        for segment in split_path(path):
            child = node.children.get(segment)
            if child is None:
                raise NotFound(f"No route matches {method} {path!r}")
            node = child
        if not node.methods:
            raise NotFound(f"No route matches {method} {path!r}")
        route = node.methods.get(method)
        if route is None:
            raise MethodNotAllowed(frozenset(node.methods))
        return route
