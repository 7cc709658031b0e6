"""Method-indexed routing table.

One pattern table per HTTP method plus one "all methods" table used as a
low-priority fallback. Tables are filled while the server is being
configured and are read-only once it freezes, so concurrent requests
share them without locking.
"""

from dataclasses import dataclass, field

from switchyard.context import Context
from switchyard.errors import FrozenError, PatternError
from switchyard.http.response import Response
from switchyard.middleware.protocol import Endpoint
from switchyard.routing.pattern import Captures, CompiledPattern, compile_pattern, split_path

HTTP_METHODS: tuple[str, ...] = (
    "GET",
    "HEAD",
    "PUT",
    "POST",
    "DELETE",
    "OPTIONS",
    "CONNECT",
    "PATCH",
    "TRACE",
)


@dataclass(frozen=True, slots=True)
class Selection:
    """The result of routing a request: an endpoint and its captures."""

    endpoint: Endpoint
    captures: Captures = field(default_factory=Captures)


@dataclass(slots=True)
class _Entry:
    pattern: CompiledPattern
    endpoint: Endpoint


class PatternTable:
    """Compiled patterns for one method, keyed by shape.

    Keying by shape (the pattern with capture names erased) is what
    rejects ``/:id`` next to ``/:name``: both would match the same
    requests and differ only in what the capture is called.
    """

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[tuple[object, ...], _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, pattern: str, endpoint: Endpoint) -> None:
        compiled = compile_pattern(pattern)
        existing = self._entries.get(compiled.shape)
        if existing is not None and existing.pattern.names != compiled.names:
            msg = f"ambiguous with {existing.pattern.source!r}, only capture names differ"
            raise PatternError(pattern, msg)
        self._entries[compiled.shape] = _Entry(compiled, endpoint)

    def best_match(self, parts: list[str]) -> tuple[_Entry, Captures] | None:
        """Most specific entry matching *parts*, or ``None``.

        Registration order never matters: ties in specificity imply equal
        shapes, and equal shapes share a single slot.
        """
        best: tuple[_Entry, Captures] | None = None
        for entry in self._entries.values():
            captures = entry.pattern.match_parts(parts)
            if captures is None:
                continue
            if best is None or entry.pattern.specificity > best[0].pattern.specificity:
                best = (entry, captures)
        return best

    def patterns(self) -> list[str]:
        return [entry.pattern.source for entry in self._entries.values()]


class NotFoundEndpoint:
    """Synthetic endpoint for paths nothing is registered under."""

    __slots__ = ()

    async def call(self, ctx: Context) -> Response:
        return Response(body="Not Found", status=404)


class MethodNotAllowedEndpoint:
    """Synthetic endpoint for paths registered only under other methods."""

    __slots__ = ("allowed",)

    def __init__(self, allowed: frozenset[str]) -> None:
        self.allowed = allowed

    async def call(self, ctx: Context) -> Response:
        return Response(body="Method Not Allowed", status=405).with_header(
            "Allow", ", ".join(sorted(self.allowed))
        )


_NOT_FOUND = NotFoundEndpoint()


class Router:
    """The routing table owned by a ``Server``.

    Usage::

        router = Router()
        router.add("GET", "/users/:id", endpoint)
        router.add_all("/static/*", fallback)
        router.freeze()
        selection = router.route("/users/42", "GET")
    """

    __slots__ = ("_all_methods", "_frozen", "_method_map")

    def __init__(self) -> None:
        self._method_map: dict[str, PatternTable] = {}
        self._all_methods = PatternTable()
        self._frozen = False

    # -- Registration --

    def add(self, method: str, pattern: str, endpoint: Endpoint) -> None:
        """Register *endpoint* for *method* at *pattern*.

        Raises ``PatternError`` for malformed or ambiguous patterns and
        ``FrozenError`` once the router is frozen.
        """
        self._check_not_frozen()
        table = self._method_map.setdefault(method.upper(), PatternTable())
        table.add(pattern, endpoint)

    def add_all(self, pattern: str, endpoint: Endpoint) -> None:
        """Register *endpoint* for every method, as a fallback."""
        self._check_not_frozen()
        self._all_methods.add(pattern, endpoint)

    def freeze(self) -> None:
        """Make the table read-only. Idempotent."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> list[tuple[str | None, str]]:
        """All registered ``(method, pattern)`` pairs; ``None`` means all methods."""
        result: list[tuple[str | None, str]] = [
            (method, pattern)
            for method, table in self._method_map.items()
            for pattern in table.patterns()
        ]
        result.extend((None, pattern) for pattern in self._all_methods.patterns())
        return result

    # -- Resolution --

    def route(self, path: str, method: str) -> Selection:
        """Resolve *path* and *method* to a ``Selection``.

        Order: method table, all-methods table, HEAD retried as GET,
        405 when some other method matches, else 404.
        """
        return self._route(split_path(path), method.upper())

    def _route(self, parts: list[str], method: str) -> Selection:
        table = self._method_map.get(method)
        found = table.best_match(parts) if table is not None else None
        if found is None:
            found = self._all_methods.best_match(parts)
        if found is not None:
            entry, captures = found
            return Selection(entry.endpoint, captures)

        if method == "HEAD":
            return self._route(parts, "GET")

        allowed = frozenset(
            other
            for other, other_table in self._method_map.items()
            if other != method and other_table.best_match(parts) is not None
        )
        if "GET" in allowed:
            allowed |= {"HEAD"}
        if allowed:
            return Selection(MethodNotAllowedEndpoint(allowed))
        return Selection(_NOT_FOUND)

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify routes after the server has started serving. "
                "Register every route before the first request."
            )
            raise FrozenError(msg)
