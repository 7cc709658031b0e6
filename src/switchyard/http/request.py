"""HTTP request handed to the dispatch core by the transport.

Metadata is plain data; the body is read asynchronously through the
transport's receive callable (or a buffered body for direct dispatch).
``path`` stays assignable so middleware and the prefix-stripping adapter
can rewrite it before routing continues.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from switchyard._internal.asgi import Receive
from switchyard.http.headers import Headers
from switchyard.http.query import QueryParams


def _buffered_receive(body: bytes) -> Receive:
    """A receive callable that yields *body* once, then disconnects."""
    sent = False

    async def receive() -> dict[str, Any]:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    return receive


@dataclass(slots=True)
class Request:
    """An HTTP request.

    ``method`` is always upper-case. ``path`` never includes the query
    string; that lives in ``query``.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: transport receive callable for body streaming
    _receive: Receive = field(default_factory=lambda: _buffered_receive(b""), repr=False)

    # Private: body cache so the stream is consumed once
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.method = self.method.upper()

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    def header(self, name: str) -> str | None:
        """Return the first value of header *name*, if present."""
        return self.headers.get(name)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        raw = await self.body()
        return raw.decode("utf-8")

    async def json(self) -> Any:
        raw = await self.body()
        return json_module.loads(raw)

    # -- Factories --

    @classmethod
    def build(
        cls,
        method: str,
        target: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | str = b"",
    ) -> Request:
        """Create a request directly, without a transport.

        *target* may carry a query string (``"/items?page=2"``).
        """
        path, _, query_string = target.partition("?")
        raw_body = body.encode("utf-8") if isinstance(body, str) else body
        return cls(
            method=method,
            path=path or "/",
            headers=Headers.from_mapping(headers),
            query=QueryParams(query_string),
            _receive=_buffered_receive(raw_body),
        )

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI HTTP scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers.from_raw(scope.get("headers", ())),
            query=QueryParams(scope.get("query_string", b"").decode("latin-1")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
