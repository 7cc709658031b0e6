"""ASGI response sending — translates switchyard Response types to ASGI messages.

Handles both standard single-body responses and chunked streaming responses.
"""

import logging
from collections.abc import AsyncIterator

from switchyard._internal.asgi import Send
from switchyard.http.response import Response, StreamingResponse

logger = logging.getLogger("switchyard.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode_chunk(chunk: str | bytes) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else chunk


def _raw_headers(content_type: str, headers: tuple[tuple[str, str], ...]) -> list[tuple[bytes, bytes]]:
    raw: list[tuple[bytes, bytes]] = [(b"content-type", content_type.encode("latin-1"))]
    raw.extend((name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers)
    return raw


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a Response into ASGI send() calls.

    For HEAD requests the body is computed for ``content-length`` and then
    dropped.
    """
    raw_headers = _raw_headers(response.content_type, response.headers)

    body = response.body_bytes if _body_allowed(response.status) else b""
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )


async def send_streaming_response(
    response: StreamingResponse,
    send: Send,
    *,
    head: bool = False,
) -> None:
    """Send a streaming response via chunked transfer encoding.

    Sends headers immediately, then each chunk as an ASGI body message
    with ``more_body=True``, and closes with an empty body. A failure
    mid-stream is logged and the stream is closed; the status line has
    already gone out, so there is nothing else to report it with.
    """
    raw_headers = _raw_headers(response.content_type, response.headers)
    raw_headers.append((b"transfer-encoding", b"chunked"))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )

    if not head and _body_allowed(response.status):
        try:
            if isinstance(response.chunks, AsyncIterator):
                async for chunk in response.chunks:
                    if chunk:
                        await send(
                            {
                                "type": "http.response.body",
                                "body": _encode_chunk(chunk),
                                "more_body": True,
                            }
                        )
            else:
                for chunk in response.chunks:
                    if chunk:
                        await send(
                            {
                                "type": "http.response.body",
                                "body": _encode_chunk(chunk),
                                "more_body": True,
                            }
                        )
        except Exception:
            logger.exception("Error while streaming response body")

    await send(
        {
            "type": "http.response.body",
            "body": b"",
            "more_body": False,
        }
    )
