"""Route table printing for startup diagnostics."""

from collections.abc import Iterable

from gardensite.routing.route import Route


def format_route_table(routes: Iterable[Route], *, static_url: str | None = None) -> str:
    """Render routes as a METHOD / PATH / HANDLER table.

    *static_url*, when given, adds a row for the static-files middleware,
    which serves requests without appearing in the router.
    """
    rows: list[tuple[str, str, str]] = []
    if static_url:
        rows.append(("GET, HEAD", f"{static_url.rstrip('/')}/*", "StaticFiles"))
    for route in routes:
        methods_str = ", ".join(sorted(route.methods))
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name:
            handler_name = f"{handler_name} ({route.name})"
        rows.append((methods_str, route.path, handler_name))

    if not rows:
        return "No routes registered.\n"

    max_methods = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    max_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{}}"
    lines = [fmt.format("METHOD", "PATH", "HANDLER")]
    sep_len = max_methods + max_path + 4 + max(len(r[2]) for r in rows)
    lines.append("-" * min(sep_len, 80))
    lines.extend(fmt.format(*row) for row in rows)
    return "\n".join(lines) + "\n"
