"""Built-in middleware adapters: Before and After.

Turn a one-sided function into middleware so simple hooks don't have to
deal with ``next``::

    server.add_middleware(Before(load_user))
    server.at("/api").with_middleware(After(add_cors_headers))
"""

from collections.abc import Callable
from typing import Any

from switchyard._internal.invoke import callable_name, invoke
from switchyard.context import Context
from switchyard.middleware.protocol import Next
from switchyard.serving.negotiation import AnyResponse


class Before:
    """Run ``func(ctx)`` before the rest of the chain.

    If *func* returns anything other than ``None``, that value becomes the
    response and the rest of the chain is skipped.
    """

    __slots__ = ("func",)

    def __init__(self, func: Callable[[Context], Any]) -> None:
        self.func = func

    def __repr__(self) -> str:
        return f"Before({callable_name(self.func)})"

    async def __call__(self, ctx: Context, next: Next) -> AnyResponse:
        result = await invoke(self.func, ctx)
        if result is not None:
            return ctx.respond(result)
        return await next(ctx)


class After:
    """Pass the response of the rest of the chain through ``func(response)``.

    *func* returns the response to use; returning ``None`` keeps the
    original.
    """

    __slots__ = ("func",)

    def __init__(self, func: Callable[[AnyResponse], Any]) -> None:
        self.func = func

    def __repr__(self) -> str:
        return f"After({callable_name(self.func)})"

    async def __call__(self, ctx: Context, next: Next) -> AnyResponse:
        response = await next(ctx)
        result = await invoke(self.func, response)
        return response if result is None else result
