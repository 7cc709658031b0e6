"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(ctx: Context, next: Next) -> Response | None

Built-in middleware:
    Before -- Run a function before the rest of the chain
    After -- Post-process the response of the rest of the chain
    LogMiddleware -- Log request arrival and response status
    TimeoutMiddleware -- Answer 503 when the chain runs too long
"""

from switchyard.middleware.builtin import After, Before
from switchyard.middleware.log import LogMiddleware
from switchyard.middleware.protocol import Endpoint, Middleware, Next
from switchyard.middleware.timeout import TimeoutMiddleware

__all__ = [
    "After",
    "Before",
    "Endpoint",
    "LogMiddleware",
    "Middleware",
    "Next",
    "TimeoutMiddleware",
]
