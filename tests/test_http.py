"""Tests for switchyard.http and return-value negotiation."""

import pytest

from switchyard.http.headers import Headers
from switchyard.http.query import QueryParams
from switchyard.http.request import Request
from switchyard.http.response import Response, StreamingResponse
from switchyard.redirect import Redirect
from switchyard.serving.negotiation import negotiate


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers([("Content-Type", "text/html")])
        assert headers["content-type"] == "text/html"
        assert "CONTENT-TYPE" in headers

    def test_repeated(self) -> None:
        headers = Headers([("Accept", "a"), ("accept", "b")])
        assert headers["accept"] == "a"
        assert headers.get_list("Accept") == ["a", "b"]
        assert len(headers) == 1

    def test_with_header_is_new(self) -> None:
        headers = Headers()
        updated = headers.with_header("X-A", "1")
        assert "x-a" not in headers
        assert updated.get("x-a") == "1"

    def test_raw(self) -> None:
        assert Headers([("X-A", "1")]).raw == ((b"x-a", b"1"),)


class TestQueryParams:
    def test_parse(self) -> None:
        query = QueryParams("a=1&b=2&a=3&empty=")
        assert query["a"] == "1"
        assert query.get_list("a") == ["1", "3"]
        assert query.get("empty") == ""
        assert query.get("missing", "x") == "x"
        assert query.raw == "a=1&b=2&a=3&empty="


class TestRequest:
    def test_build(self) -> None:
        request = Request.build("get", "/items?page=2", headers={"X-Trace": "abc"})
        assert request.method == "GET"
        assert request.path == "/items"
        assert request.query["page"] == "2"
        assert request.header("x-trace") == "abc"
        assert request.url == "/items?page=2"

    async def test_body(self) -> None:
        request = Request.build("POST", "/", body='{"n": 1}')
        assert await request.json() == {"n": 1}
        assert await request.text() == '{"n": 1}'

    def test_path_is_mutable(self) -> None:
        request = Request.build("GET", "/outer/inner")
        request.path = "/inner"
        assert request.path == "/inner"


class TestResponse:
    def test_chaining_returns_new(self) -> None:
        original = Response("body")
        changed = original.with_status(201).with_header("X-A", "1").with_content_type("text/html")
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 201
        assert changed.header("x-a") == "1"
        assert changed.content_type == "text/html"

    def test_with_headers(self) -> None:
        response = Response().with_headers({"X-A": "1", "X-B": "2"})
        assert response.header("X-B") == "2"

    def test_body_conversions(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"raw").text == "raw"

    def test_streaming_with_header(self) -> None:
        response = StreamingResponse(iter(())).with_status(206).with_header("X-A", "1")
        assert response.status == 206
        assert response.header("x-a") == "1"


class TestNegotiate:
    def test_none_keeps_current(self) -> None:
        current = Response("current")
        assert negotiate(None, current) is current

    def test_response_passthrough(self) -> None:
        response = Response("mine")
        assert negotiate(response, Response()) is response

    def test_str(self) -> None:
        response = negotiate("hello", Response())
        assert response.text == "hello"
        assert response.content_type.startswith("text/plain")

    def test_bytes(self) -> None:
        assert negotiate(b"\x00", Response()).content_type == "application/octet-stream"

    def test_json(self) -> None:
        response = negotiate([1, 2], Response())
        assert response.text == "[1, 2]"
        assert response.content_type.startswith("application/json")

    def test_redirect(self) -> None:
        response = negotiate(Redirect("/x"), Response())
        assert response.status == 302
        assert response.header("location") == "/x"

    def test_tuple_status(self) -> None:
        response = negotiate(("created", 201), Response())
        assert response.status == 201
        assert response.text == "created"

    def test_tuple_status_headers(self) -> None:
        response = negotiate(("gone", 410, {"X-Reason": "deleted"}), Response())
        assert response.status == 410
        assert response.header("X-Reason") == "deleted"

    def test_unknown_type(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert"):
            negotiate(3.14, Response())
