"""Async test client for switchyard servers.

Uses the same Request and Response types as production.
No wrapper translation layer.
"""

from __future__ import annotations

import json as json_module
from typing import Any

from switchyard._internal.invoke import invoke
from switchyard.http.response import Response
from switchyard.server import Server


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for switchyard servers.

    Returns the same ``Response`` type used in production. Sends requests
    through the ASGI interface directly — no sockets involved. Every
    response header except ``content-type`` is kept, ``content-length``
    included.

    Usage::

        async with TestClient(server) as client:
            response = await client.get("/")
            assert response.status == 200
    """

    __slots__ = ("server",)

    def __init__(self, server: Server) -> None:
        self.server = server

    async def __aenter__(self) -> TestClient:
        self.server.freeze()
        for hook in self.server._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.server._shutdown_hooks:
            await invoke(hook)

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a HEAD request."""
        return await self.request("HEAD", path, headers=headers)

    async def options(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send an OPTIONS request."""
        return await self.request("OPTIONS", path, headers=headers)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a POST request, optionally with a JSON body."""
        return await self._with_body("POST", path, headers=headers, body=body, json=json)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PUT request."""
        return await self._with_body("PUT", path, headers=headers, body=body, json=json)

    async def patch(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a PATCH request."""
        return await self._with_body("PATCH", path, headers=headers, body=body, json=json)

    async def _with_body(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None,
        body: bytes | None,
        json: Any,
    ) -> Response:
        extra_headers: dict[str, str] = {}
        request_body = body or b""
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"
        merged = {**extra_headers, **(headers or {})}
        return await self.request(method, path, headers=merged, body=request_body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        if "?" in path:
            path_part, query_string = path.split("?", 1)
        else:
            path_part = path
            query_string = ""

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        response_status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        response_body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                response_body_parts.append(message.get("body", b""))

        await self.server(scope, receive, send)

        content_type = ""
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name_str = name_b.decode("latin-1")
            value_str = value_b.decode("latin-1")
            if name_str == "content-type":
                content_type = value_str
            else:
                extra_headers.append((name_str, value_str))

        return Response(
            body=b"".join(response_body_parts),
            status=response_status,
            content_type=content_type,
            headers=tuple(extra_headers),
        )
