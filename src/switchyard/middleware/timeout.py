"""Request timeout middleware.

Bounds the time the rest of the chain may take. On expiry the chain is
cancelled and a 503 is raised for the dispatcher to convert.
"""

import logging

import anyio

from switchyard.context import Context
from switchyard.errors import HTTPError
from switchyard.middleware.protocol import Next
from switchyard.serving.negotiation import AnyResponse

logger = logging.getLogger("switchyard.server")


class TimeoutMiddleware:
    """Cancel requests that take longer than *seconds*.

    Usage::

        server.add_middleware(TimeoutMiddleware(5.0))
    """

    __slots__ = ("seconds",)

    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            msg = f"Timeout must be positive, got {seconds!r}"
            raise ValueError(msg)
        self.seconds = seconds

    def __repr__(self) -> str:
        return f"TimeoutMiddleware({self.seconds!r})"

    async def __call__(self, ctx: Context, next: Next) -> AnyResponse:
        response: AnyResponse | None = None
        with anyio.move_on_after(self.seconds) as scope:
            response = await next(ctx)
        if scope.cancelled_caught or response is None:
            logger.warning(
                "Request timed out after %.1fs: %s %s",
                self.seconds,
                ctx.request.method,
                ctx.request.path,
            )
            raise HTTPError(status=503, detail="Request Timeout")
        return response
