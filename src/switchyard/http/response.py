"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Middleware post-processes a
response by chaining ``with_*`` calls on what ``next`` returned.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Mapping
from dataclasses import dataclass, replace

TEXT_PLAIN = "text/plain; charset=utf-8"


def _lookup(headers: tuple[tuple[str, str], ...], name: str) -> list[str]:
    name_lower = name.lower()
    return [value for key, value in headers if key.lower() == name_lower]


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = TEXT_PLAIN
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_body(self, body: str | bytes) -> Response:
        """Return a new Response with a different body."""
        return replace(self, body=body)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    # -- Inspection --

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or ``None``."""
        values = _lookup(self.headers, name)
        return values[0] if values else None

    def header_list(self, name: str) -> list[str]:
        """All values of header *name* (case-insensitive)."""
        return _lookup(self.headers, name)

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class StreamingResponse:
    """A response whose body is produced chunk by chunk.

    Supports the same ``.with_*()`` API as ``Response`` so middleware can
    adjust status and headers without knowing the body is streamed.
    """

    chunks: Iterator[str | bytes] | AsyncIterator[str | bytes]
    status: int = 200
    content_type: str = TEXT_PLAIN
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> StreamingResponse:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> StreamingResponse:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> StreamingResponse:
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> StreamingResponse:
        return replace(self, content_type=content_type)

    def header(self, name: str) -> str | None:
        values = _lookup(self.headers, name)
        return values[0] if values else None
