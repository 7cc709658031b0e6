"""Request logging middleware.

Logs each request on arrival and its response on completion through the
``switchyard.request`` logger. The level of the completion line follows
the status: INFO below 400, WARNING for 4xx, ERROR for 5xx.
"""

import logging
import time
from dataclasses import dataclass

from switchyard.context import Context
from switchyard.errors import HTTPError
from switchyard.middleware.protocol import Next
from switchyard.serving.negotiation import AnyResponse

logger = logging.getLogger("switchyard.request")


@dataclass(frozen=True, slots=True)
class RequestLogged:
    """Typed-store marker: this request is already being logged."""

    started: float


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class LogMiddleware:
    """Log request arrival and response status with timing.

    Safe to install on nested servers too: a request is only logged by the
    outermost ``LogMiddleware`` it passes through.
    """

    __slots__ = ("logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.logger = log or logger

    async def __call__(self, ctx: Context, next: Next) -> AnyResponse:
        if RequestLogged in ctx:
            return await next(ctx)

        request = ctx.request
        method, path = request.method, request.path
        marker = RequestLogged(time.perf_counter())
        ctx.insert(marker)
        self.logger.info("<-- Request received: %s %s", method, path)

        status = 500
        try:
            response = await next(ctx)
            status = response.status
            return response
        except HTTPError as exc:
            status = exc.status
            raise
        finally:
            elapsed_ms = (time.perf_counter() - marker.started) * 1000
            self.logger.log(
                _level_for(status),
                "--> Response sent: %s %s %d (%.1fms)",
                method,
                path,
                status,
                elapsed_ms,
            )
