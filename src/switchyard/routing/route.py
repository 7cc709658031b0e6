"""Fluent route builder.

``Server.at(path)`` returns a ``RouteBuilder`` scoped to that path. The
builder accumulates route-level middleware and registers endpoints for
HTTP methods at its path; ``at`` derives child builders and ``nest``
mounts a whole sub-server under the path::

    api = server.at("/api")
    api.with_middleware(require_auth)
    api.at("/users/:id").get(show_user).delete(delete_user)
    server.at("/admin").nest(admin_server)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from switchyard.context import Context
from switchyard.middleware.protocol import Endpoint, MiddlewareEndpoint, as_endpoint
from switchyard.serving.negotiation import AnyResponse

if TYPE_CHECKING:
    from switchyard.routing.router import Router
    from switchyard.server import Server


def join_path(base: str, subpath: str) -> str:
    """Join two route paths with exactly one ``/`` between them."""
    if subpath in ("", "/"):
        return base or "/"
    return base.rstrip("/") + "/" + subpath.lstrip("/")


class StripPrefixEndpoint:
    """Runs an endpoint as if it were mounted at ``/``.

    Rewrites the request path to the wildcard remainder captured by the
    mounting pattern, then restores it once the endpoint returns.
    """

    __slots__ = ("endpoint",)

    def __init__(self, endpoint: Endpoint) -> None:
        self.endpoint = endpoint

    def __repr__(self) -> str:
        return f"<StripPrefixEndpoint {self.endpoint!r}>"

    async def call(self, ctx: Context) -> AnyResponse:
        original = ctx.request.path
        ctx.request.path = "/" + (ctx.wildcard() or "")
        try:
            return await self.endpoint.call(ctx)
        finally:
            ctx.request.path = original


class RouteBuilder:
    """A handle to a route while the server is being configured.

    Middleware added with ``with_middleware`` applies to endpoints
    registered through this builder (and builders derived from it with
    ``at``) from that point on. Children take a snapshot of the list, so
    later additions on the parent never reach them.
    """

    __slots__ = ("_middleware", "_prefix", "_router", "path")

    def __init__(self, router: Router, path: str, middleware: list[Any] | None = None) -> None:
        self._router = router
        self.path = path
        self._middleware: list[Any] = list(middleware or ())
        self._prefix = False

    def __repr__(self) -> str:
        return f"<RouteBuilder {self.path!r} middleware={len(self._middleware)}>"

    # -- Scoping --

    def at(self, subpath: str) -> RouteBuilder:
        """Extend the route with *subpath*."""
        return RouteBuilder(self._router, join_path(self.path, subpath), self._middleware)

    def with_middleware(self, middleware: Any) -> RouteBuilder:
        """Apply *middleware* to endpoints registered from now on."""
        self._middleware.append(middleware)
        return self

    def reset_middleware(self) -> RouteBuilder:
        """Drop this builder's accumulated middleware."""
        self._middleware.clear()
        return self

    def strip_prefix(self) -> RouteBuilder:
        """Treat the current path as a prefix.

        Endpoints registered afterwards are mounted at ``path/*`` and see
        the request path with everything up to the prefix removed.
        """
        self._prefix = True
        return self

    # -- Registration --

    def method(self, method: str, handler: Any) -> RouteBuilder:
        """Register *handler* for HTTP *method* at the current path."""
        path, endpoint = self._bake(handler)
        self._router.add(method, path, endpoint)
        return self

    def all(self, handler: Any) -> RouteBuilder:
        """Register *handler* for every HTTP method, as a fallback.

        Routes registered for a specific method are tried first.
        """
        path, endpoint = self._bake(handler)
        self._router.add_all(path, endpoint)
        return self

    def nest(self, server: Server) -> RouteBuilder:
        """Mount *server* under the current path.

        The sub-server routes as if mounted at ``/``. The outer server
        always wins when both could serve the same literal path. Nesting
        hands the sub-server off, so it stops accepting registrations.
        """
        server.freeze()
        prefix = self._prefix
        self._prefix = True
        try:
            self.all(server)
        finally:
            self._prefix = prefix
        return self

    def get(self, handler: Any) -> RouteBuilder:
        return self.method("GET", handler)

    def head(self, handler: Any) -> RouteBuilder:
        return self.method("HEAD", handler)

    def put(self, handler: Any) -> RouteBuilder:
        return self.method("PUT", handler)

    def post(self, handler: Any) -> RouteBuilder:
        return self.method("POST", handler)

    def delete(self, handler: Any) -> RouteBuilder:
        return self.method("DELETE", handler)

    def options(self, handler: Any) -> RouteBuilder:
        return self.method("OPTIONS", handler)

    def connect(self, handler: Any) -> RouteBuilder:
        return self.method("CONNECT", handler)

    def patch(self, handler: Any) -> RouteBuilder:
        return self.method("PATCH", handler)

    def trace(self, handler: Any) -> RouteBuilder:
        return self.method("TRACE", handler)

    def _bake(self, handler: Any) -> tuple[str, Endpoint]:
        """Resolve the registration path and wrap *handler* in middleware."""
        if self._prefix:
            return (
                join_path(self.path, "*"),
                MiddlewareEndpoint.wrap(StripPrefixEndpoint(as_endpoint(handler)), self._middleware),
            )
        return self.path, MiddlewareEndpoint.wrap(handler, self._middleware)
