"""Switchyard exception hierarchy.

Shared across the router, route builder, server, and middleware so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when the server is wired up incorrectly.

    Always surfaced at registration time, never deferred to a request.
    """


class PatternError(ConfigurationError):
    """A route pattern is malformed or ambiguous with an existing one."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class FrozenError(ConfigurationError):
    """Routes or middleware were added after the server started serving."""


class ParamNotFound(SwitchyardError, LookupError):  # noqa: N818
    """``Context.param()`` was asked for a name no matched route binds."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Param "{name}" not found')
        self.name = name


class MissingValue(SwitchyardError, LookupError):  # noqa: N818
    """The typed store holds no value of the requested type."""

    def __init__(self, key: type) -> None:
        super().__init__(f"Context value `{key.__qualname__}` does not exist")
        self.key = key


@dataclass(frozen=True, slots=True)
class HTTPError(SwitchyardError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or middleware. The server catches these at the
    outermost dispatch boundary and turns them into a response carrying
    ``status``, ``detail`` as the body, and any extra ``headers``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request could not be understood (e.g. unparseable param)."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404 — no resource for the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the resource exists but not for this HTTP method.

    Carries an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "Method Not Allowed") -> None:
        super().__init__(
            status=405,
            detail=detail,
            headers=(("Allow", ", ".join(sorted(allowed))),),
        )
