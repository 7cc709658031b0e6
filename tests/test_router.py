"""Tests for switchyard.routing.router — method-indexed pattern tables."""

import pytest

from switchyard.context import Context
from switchyard.errors import FrozenError, PatternError
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.routing.router import (
    MethodNotAllowedEndpoint,
    NotFoundEndpoint,
    Router,
)


class _Named:
    """Endpoint that answers with its own name."""

    def __init__(self, name: str) -> None:
        self.name = name

    async def call(self, ctx: Context) -> Response:
        return Response(self.name)


def _ctx(method: str = "GET", path: str = "/") -> Context:
    return Context(Request.build(method, path))


class TestRouterRegistration:
    def test_routes_listing(self) -> None:
        r = Router()
        r.add("get", "/users", _Named("users"))
        r.add_all("/static/*", _Named("static"))
        assert ("GET", "/users") in r.routes
        assert (None, "/static/*") in r.routes

    def test_ambiguous_capture_names_rejected(self) -> None:
        r = Router()
        r.add("GET", "/users/:id", _Named("a"))
        with pytest.raises(PatternError, match="ambiguous"):
            r.add("GET", "/users/:name", _Named("b"))

    def test_ambiguity_is_per_method(self) -> None:
        r = Router()
        r.add("GET", "/users/:id", _Named("a"))
        r.add("POST", "/users/:name", _Named("b"))
        assert r.route("/users/1", "POST").captures["name"] == "1"

    def test_identical_pattern_replaces(self) -> None:
        r = Router()
        first, second = _Named("first"), _Named("second")
        r.add("GET", "/users/:id", first)
        r.add("GET", "/users/:id", second)
        assert r.route("/users/1", "GET").endpoint is second

    def test_frozen_rejects_add(self) -> None:
        r = Router()
        r.freeze()
        with pytest.raises(FrozenError):
            r.add("GET", "/", _Named("root"))
        with pytest.raises(FrozenError):
            r.add_all("/", _Named("root"))


class TestRouterResolution:
    def test_most_specific_wins(self) -> None:
        r = Router()
        captures_two = _Named("two")
        posts = _Named("posts")
        r.add("GET", "/:one/:two", captures_two)
        r.add("GET", "/posts/*", posts)

        assert r.route("/posts/10", "GET").endpoint is posts
        assert r.route("/other/10", "GET").endpoint is captures_two

    def test_registration_order_irrelevant(self) -> None:
        for order in ((0, 1), (1, 0)):
            r = Router()
            endpoints = [("/:one/:two", _Named("two")), ("/posts/*", _Named("posts"))]
            for index in order:
                r.add("GET", *endpoints[index])
            assert r.route("/posts/10", "GET").endpoint is endpoints[1][1]

    def test_literal_beats_capture(self) -> None:
        r = Router()
        me, by_id = _Named("me"), _Named("id")
        r.add("GET", "/users/:id", by_id)
        r.add("GET", "/users/me", me)
        assert r.route("/users/me", "GET").endpoint is me
        assert r.route("/users/7", "GET").endpoint is by_id

    def test_captures_returned(self) -> None:
        r = Router()
        r.add("GET", "/users/:id/posts/:post", _Named("post"))
        captures = r.route("/users/1/posts/2", "GET").captures
        assert dict(captures) == {"id": "1", "post": "2"}

    def test_method_table_before_all_methods(self) -> None:
        r = Router()
        specific, fallback = _Named("specific"), _Named("fallback")
        r.add_all("/thing", fallback)
        r.add("POST", "/thing", specific)
        assert r.route("/thing", "POST").endpoint is specific
        assert r.route("/thing", "DELETE").endpoint is fallback

    def test_all_methods_used_when_method_table_misses(self) -> None:
        r = Router()
        users, mounted = _Named("users"), _Named("mounted")
        r.add("GET", "/users", users)
        r.add_all("/api/*", mounted)
        assert r.route("/api/anything", "GET").endpoint is mounted

    def test_head_falls_back_to_get(self) -> None:
        r = Router()
        get = _Named("get")
        r.add("GET", "/page", get)
        assert r.route("/page", "HEAD").endpoint is get

    def test_explicit_head_preferred(self) -> None:
        r = Router()
        get, head = _Named("get"), _Named("head")
        r.add("GET", "/page", get)
        r.add("HEAD", "/page", head)
        assert r.route("/page", "HEAD").endpoint is head

    def test_method_is_case_insensitive(self) -> None:
        r = Router()
        get = _Named("get")
        r.add("GET", "/page", get)
        assert r.route("/page", "get").endpoint is get

    def test_idempotent_when_frozen(self) -> None:
        r = Router()
        r.add("GET", "/users/:id", _Named("user"))
        r.freeze()
        first = r.route("/users/5", "GET")
        second = r.route("/users/5", "GET")
        assert first == second


class TestSyntheticEndpoints:
    async def test_not_found(self) -> None:
        r = Router()
        r.add("GET", "/users", _Named("users"))
        selection = r.route("/nope", "GET")
        assert isinstance(selection.endpoint, NotFoundEndpoint)

        response = await selection.endpoint.call(_ctx())
        assert response.status == 404
        assert response.text == "Not Found"

    async def test_method_not_allowed(self) -> None:
        r = Router()
        r.add("GET", "/users", _Named("get"))
        r.add("POST", "/users", _Named("post"))
        selection = r.route("/users", "DELETE")
        assert isinstance(selection.endpoint, MethodNotAllowedEndpoint)

        response = await selection.endpoint.call(_ctx("DELETE", "/users"))
        assert response.status == 405
        assert response.header("Allow") == "GET, HEAD, POST"

    async def test_allow_lists_head_only_with_get(self) -> None:
        r = Router()
        r.add("GET", "/page", _Named("get"))
        r.add("PUT", "/upload", _Named("put"))

        page = await r.route("/page", "POST").endpoint.call(_ctx("POST", "/page"))
        upload = await r.route("/upload", "POST").endpoint.call(_ctx("POST", "/upload"))
        assert page.header("Allow") == "GET, HEAD"
        assert upload.header("Allow") == "PUT"

    def test_not_found_when_only_all_methods_misses(self) -> None:
        r = Router()
        r.add_all("/api/*", _Named("api"))
        assert isinstance(r.route("/other", "GET").endpoint, NotFoundEndpoint)
