"""Switchyard server.

Mutable during setup (route registration, middleware, lifecycle hooks).
Frozen when it first serves: the first dispatch, the first ASGI call,
``run()``, or being nested into another server.
"""

import threading
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard.config import ServerConfig
from switchyard.context import Context, context_var
from switchyard.errors import FrozenError, HTTPError
from switchyard.http.request import Request
from switchyard.middleware.log import LogMiddleware
from switchyard.middleware.protocol import Middleware, Next
from switchyard.middleware.timeout import TimeoutMiddleware
from switchyard.routing.route import RouteBuilder
from switchyard.routing.router import Router
from switchyard.serving.asgi import handle_lifespan, handle_request
from switchyard.serving.errors import handle_http_error, handle_internal_error
from switchyard.serving.negotiation import AnyResponse


class Server:
    """A routing table plus global middleware, served over ASGI.

    Usage::

        server = Server()
        server.at("/hello/:name").get(lambda ctx: f"Hello, {ctx.param('name')}!")

        @server.route("/health")
        def health(ctx):
            return {"ok": True}

        server.run()

    A Server is also an endpoint, so one server can be mounted inside
    another with ``outer.at("/api").nest(inner)``.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock plus a
        double check so exactly one thread compiles the middleware chain,
        even when several workers deliver their first request at once.
        After freezing, the router and middleware tuple are read-only.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "state",
    )

    def __init__(self, config: ServerConfig | None = None, *, state: Any = None) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self.state = state
        self._router = Router()
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._middleware: tuple[Middleware, ...] = ()

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "configuring"
        return f"<Server routes={len(self._router.routes)} {state}>"

    # -- Route registration --

    def at(self, path: str) -> RouteBuilder:
        """Return a builder for routes at *path*."""
        self._check_not_frozen()
        return RouteBuilder(self._router, path)

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a route handler via decorator.

        Args:
            path: Route pattern, e.g. ``/users/:id`` or ``/static/*``.
            methods: HTTP methods. Defaults to ``["GET"]``; ``["*"]``
                registers the handler for every method.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            builder = self.at(path)
            for method in methods or ["GET"]:
                if method == "*":
                    builder.all(func)
                else:
                    builder.method(method.upper(), func)
            return func

        return decorator

    @property
    def routes(self) -> list[tuple[str | None, str]]:
        """Registered ``(method, pattern)`` pairs; ``None`` means all methods."""
        return self._router.routes

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware that runs for every request, before route middleware."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the transport begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Serving --

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Stop accepting registrations and compile the middleware chain.

        Called implicitly when the server first serves. Idempotent.
        """
        self._ensure_frozen()

    async def dispatch(self, request: Request) -> AnyResponse:
        """Route *request* through the middleware chain to its endpoint.

        Never raises ``Exception``: an ``HTTPError`` becomes a response with
        its status, anything else becomes a 500. Cancellation propagates.
        """
        self._ensure_frozen()
        ctx = Context(request, state=self.state)
        token = context_var.set(ctx)
        try:
            return await self.call(ctx)
        except HTTPError as exc:
            return handle_http_error(exc, request)
        except Exception as exc:
            return handle_internal_error(exc, request, expose=self.config.expose_errors)
        finally:
            context_var.reset(token)

    async def call(self, ctx: Context) -> AnyResponse:
        """Serve *ctx* as an endpoint, routing on ``ctx.request.path``.

        Pushes this server's captures onto ``ctx.params`` and, if the
        server has its own state, exposes it as ``ctx.state`` until the
        call returns.
        """
        self._ensure_frozen()
        selection = self._router.route(ctx.request.path, ctx.request.method)
        ctx.params.append(selection.captures)

        outer_state = ctx.state
        if self.state is not None:
            ctx.state = self.state
        try:
            return await Next(selection.endpoint, self._middleware).run(ctx)
        finally:
            ctx.state = outer_state

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the server and serve it with pounce until interrupted.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        from switchyard.serving.run import run_server

        self._ensure_frozen()
        config = replace(
            self.config,
            host=host if host is not None else self.config.host,
            port=port if port is not None else self.config.port,
        )
        run_server(self, config)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes to
        the request pipeline.
        """
        self._ensure_frozen()
        if scope["type"] == "lifespan":
            await handle_lifespan(
                receive,
                send,
                startup=self._startup_hooks,
                shutdown=self._shutdown_hooks,
            )
            return
        await handle_request(scope, receive, send, dispatch=self.dispatch)

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the server into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        builtin: list[Middleware] = []
        if self.config.log_requests:
            builtin.append(LogMiddleware())
        if self.config.request_timeout is not None:
            builtin.append(TimeoutMiddleware(self.config.request_timeout))

        self._middleware = (*builtin, *self._middleware_list)
        self._router.freeze()
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the server after it has started serving. "
                "Register routes, middleware, and hooks before the first request."
            )
            raise FrozenError(msg)
