"""Per-request context.

A ``Context`` is created for every dispatched request and discarded when
the dispatch returns. It carries:

- ``request`` and the in-progress ``response``;
- ``params``, the stack of ``Captures`` pushed by each routing pass
  (outer server first, nested servers after it);
- a typed store holding at most one value per type, used by middleware
  and handlers to hand each other data without a shared schema;
- ``state``, the application state of the server currently handling it.

The active context is also published through a ContextVar, so code deep
in a call stack can reach it with ``get_context()``.

Thread safety:
    A Context is never shared between requests. ``ContextVar`` is
    task-local under asyncio, so no locks are needed.
"""

from contextvars import ContextVar
from typing import Any, TypeVar

from switchyard.errors import MissingValue, ParamNotFound
from switchyard.http.request import Request
from switchyard.http.response import Response
from switchyard.routing.pattern import Captures
from switchyard.serving.negotiation import AnyResponse, negotiate

T = TypeVar("T")

context_var: ContextVar["Context"] = ContextVar("switchyard_context")
"""The context of the request being dispatched on this task."""


def get_context() -> "Context":
    """Return the context of the current request.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return context_var.get()


class Context:
    """The mutable state of one in-flight request."""

    __slots__ = ("_store", "params", "request", "response", "state")

    def __init__(
        self,
        request: Request,
        params: list[Captures] | None = None,
        *,
        state: Any = None,
    ) -> None:
        self.request = request
        self.response: AnyResponse = Response()
        self.params: list[Captures] = params if params is not None else []
        self.state = state
        self._store: dict[type, Any] = {}

    def __repr__(self) -> str:
        return f"<Context {self.request.method} {self.request.path!r}>"

    # -- Typed store --

    def insert(self, value: T) -> T | None:
        """Store *value* under its concrete type.

        Returns the value it replaced, or ``None`` if the slot was empty.
        """
        previous = self._store.get(type(value))
        self._store[type(value)] = value
        return previous

    def try_borrow(self, key: type[T]) -> T | None:
        """Return the stored value of type *key*, or ``None``."""
        return self._store.get(key)

    def borrow(self, key: type[T]) -> T:
        """Return the stored value of type *key*.

        Raises ``MissingValue`` if there is none. Values are returned by
        reference, so mutating the result mutates the stored value.
        """
        try:
            return self._store[key]
        except KeyError:
            raise MissingValue(key) from None

    def try_take(self, key: type[T]) -> T | None:
        """Remove and return the value of type *key*, or ``None``."""
        return self._store.pop(key, None)

    def take(self, key: type[T]) -> T:
        """Remove and return the value of type *key*.

        Raises ``MissingValue`` if there is none.
        """
        try:
            return self._store.pop(key)
        except KeyError:
            raise MissingValue(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._store

    # -- Route captures --

    def param(self, name: str) -> str:
        """Return the segment captured as *name*.

        Searches the innermost routing pass first, so a nested server's
        capture shadows an outer one of the same name. Raises
        ``ParamNotFound`` when no matched pattern declares *name*.
        """
        for captures in reversed(self.params):
            if name in captures:
                return captures[name]
        raise ParamNotFound(name)

    def wildcard(self) -> str | None:
        """Return the wildcard remainder of the innermost match that has one."""
        for captures in reversed(self.params):
            if captures.wildcard is not None:
                return captures.wildcard
        return None

    # -- Response --

    def respond(self, result: Any) -> AnyResponse:
        """Negotiate *result* into a response and make it the current one.

        ``None`` keeps whatever is already in ``self.response``.
        """
        self.response = negotiate(result, self.response)
        return self.response
