"""Write a Response to ASGI ``send()``."""

from gardensite._internal.asgi import Send
from gardensite.http.response import Response

# Statuses that never carry a body
_NO_BODY = frozenset({204, 304})


def encode_headers(response: Response, body_length: int) -> list[tuple[bytes, bytes]]:
    """ASGI header list for *response*: lowercase names, our own content-length."""
    headers = [(b"content-type", response.content_type.encode("latin-1"))]
    headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
        if name.lower() != "content-length"
    )
    headers.append((b"content-length", str(body_length).encode("latin-1")))
    return headers


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Emit ``http.response.start`` and one ``http.response.body``.

    1xx, 204 and 304 responses are sent with an empty body. A ``HEAD``
    response advertises the full length but sends no bytes.
    """
    status = response.status
    body = b"" if status < 200 or status in _NO_BODY else response.body_bytes
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": b"" if head else body})
