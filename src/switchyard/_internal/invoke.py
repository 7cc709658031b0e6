"""Invoke helpers — call sync or async user code uniformly.

Handlers and middleware can be ``def`` or ``async def``. Anything that
calls user-provided code goes through ``invoke`` so the sync/async check
lives in exactly one place::

    result = await invoke(handler, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def callable_name(func: Any) -> str:
    """A readable name for a handler or middleware, for logs and reprs."""
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", None)
    if name is None:
        name = type(func).__qualname__
    return name
