"""HTTP redirection endpoint.

A ``Redirect`` can be registered directly as an endpoint or returned from
a handler::

    server.at("/").get(lambda ctx: "meow")
    server.at("/nori").get(Redirect.temporary("/"))

    def route_handler(ctx):
        if (url := next_product()) is not None:
            return Redirect(url)
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from switchyard.http.response import Response

if TYPE_CHECKING:
    from switchyard.context import Context


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect to ``location``. Defaults to 302 Found."""

    location: str
    status: int = 302

    @classmethod
    def permanent(cls, location: str) -> Redirect:
        """308 Permanent Redirect."""
        return cls(location, 308)

    @classmethod
    def temporary(cls, location: str) -> Redirect:
        """307 Temporary Redirect."""
        return cls(location, 307)

    @classmethod
    def see_other(cls, location: str) -> Redirect:
        """303 See Other."""
        return cls(location, 303)

    def to_response(self) -> Response:
        return Response(body="", status=self.status).with_header("Location", self.location)

    async def call(self, ctx: Context) -> Response:
        return self.to_response()
