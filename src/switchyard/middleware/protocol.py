"""Endpoint and middleware protocols, and the ``Next`` chain runner.

An endpoint is either a plain callable taking the context::

    def hello(ctx: Context) -> str: ...
    async def hello(ctx: Context) -> Response: ...

or any object with an async ``call(ctx)`` method (``Server`` and
``Redirect`` are such objects). A middleware is any callable matching::

    async def my_mw(ctx: Context, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.
Middleware may return ``None`` to mean "whatever is in ``ctx.response``".
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from switchyard._internal.invoke import callable_name, invoke
from switchyard.context import Context
from switchyard.serving.negotiation import AnyResponse


@runtime_checkable
class Endpoint(Protocol):
    """The terminal unit producing a response for a matched route."""

    async def call(self, ctx: Context) -> AnyResponse: ...


class Middleware(Protocol):
    """Protocol for switchyard middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: Context, next: Next) -> AnyResponse:
            start = time.monotonic()
            response = await next(ctx)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireAuth:
            async def __call__(self, ctx: Context, next: Next) -> AnyResponse:
                ...
    """

    async def __call__(self, ctx: Context, next: "Next") -> AnyResponse | None: ...


class FunctionEndpoint:
    """Adapts a ``handler(ctx)`` callable, sync or async, to ``Endpoint``."""

    __slots__ = ("handler",)

    def __init__(self, handler: Any) -> None:
        self.handler = handler

    def __repr__(self) -> str:
        return f"<FunctionEndpoint {callable_name(self.handler)}>"

    async def call(self, ctx: Context) -> AnyResponse:
        result = await invoke(self.handler, ctx)
        return ctx.respond(result)


def as_endpoint(handler: Any) -> Endpoint:
    """Return *handler* as an ``Endpoint``.

    Objects that already provide ``call`` are used as they are. Classes are
    rejected; register an instance instead.
    """
    if isinstance(handler, type):
        msg = f"Endpoint must be an instance, got the class {handler.__name__}"
        raise TypeError(msg)
    if isinstance(handler, Endpoint):
        return handler
    if not callable(handler):
        msg = f"Endpoint must be callable or provide call(ctx), got {type(handler).__name__}"
        raise TypeError(msg)
    return FunctionEndpoint(handler)


class Next:
    """The remainder of a middleware chain, including the endpoint.

    Holds the middleware tuple, the terminal endpoint, and the index of
    the next middleware to run; all three are fixed for the request.
    ``run`` may be awaited at most once per ``Next`` instance.
    """

    __slots__ = ("_endpoint", "_index", "_middleware", "_used")

    def __init__(
        self,
        endpoint: Endpoint,
        middleware: Sequence[Any] = (),
        index: int = 0,
    ) -> None:
        self._endpoint = endpoint
        self._middleware = middleware
        self._index = index
        self._used = False

    def __repr__(self) -> str:
        remaining = max(len(self._middleware) - self._index, 0)
        return f"<Next remaining={remaining} endpoint={self._endpoint!r}>"

    async def run(self, ctx: Context) -> AnyResponse:
        """Run the rest of the chain and return its response."""
        if self._used:
            msg = "Next.run() was awaited more than once by the same middleware"
            raise RuntimeError(msg)
        self._used = True

        if self._index < len(self._middleware):
            current = self._middleware[self._index]
            advanced = Next(self._endpoint, self._middleware, self._index + 1)
            result = await invoke(current, ctx, advanced)
            return ctx.respond(result)
        return ctx.respond(await self._endpoint.call(ctx))

    async def __call__(self, ctx: Context) -> AnyResponse:
        return await self.run(ctx)


class MiddlewareEndpoint:
    """An endpoint with route-level middleware baked in at registration."""

    __slots__ = ("endpoint", "middleware")

    def __init__(self, endpoint: Endpoint, middleware: Sequence[Any]) -> None:
        self.endpoint = endpoint
        self.middleware = tuple(middleware)

    def __repr__(self) -> str:
        return f"<MiddlewareEndpoint length={len(self.middleware)} endpoint={self.endpoint!r}>"

    @classmethod
    def wrap(cls, endpoint: Any, middleware: Sequence[Any]) -> Endpoint:
        """Wrap *endpoint* in *middleware*, or return it bare if there is none."""
        target = as_endpoint(endpoint)
        if not middleware:
            return target
        return cls(target, middleware)

    async def call(self, ctx: Context) -> AnyResponse:
        return await Next(self.endpoint, self.middleware).run(ctx)
