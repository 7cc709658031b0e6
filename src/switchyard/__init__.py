"""Switchyard — a small async HTTP routing and middleware framework.

Routes requests by method and path pattern to endpoints, runs them
through global and per-route middleware, and nests whole servers under
path prefixes.

Basic usage::

    from switchyard import Server

    server = Server()

    server.at("/hello/:name").get(lambda ctx: f"Hello, {ctx.param('name')}!")

    server.run()

Any ASGI 3 transport can serve a ``Server`` directly; ``server.run()``
uses pounce (``pip install switchyard[server]``).
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "After",
    "AnyResponse",
    "BadRequest",
    "Before",
    "ConfigurationError",
    "Context",
    "Endpoint",
    "FrozenError",
    "HTTPError",
    "LogMiddleware",
    "MethodNotAllowed",
    "Middleware",
    "MissingValue",
    "Next",
    "NotFound",
    "ParamNotFound",
    "PatternError",
    "Redirect",
    "Request",
    "Response",
    "RouteBuilder",
    "Server",
    "ServerConfig",
    "StreamingResponse",
    "SwitchyardError",
    "TimeoutMiddleware",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    if name == "Server":
        from switchyard.server import Server

        return Server

    if name == "ServerConfig":
        from switchyard.config import ServerConfig

        return ServerConfig

    if name == "RouteBuilder":
        from switchyard.routing.route import RouteBuilder

        return RouteBuilder

    if name == "Request":
        from switchyard.http.request import Request

        return Request

    if name in ("Response", "StreamingResponse"):
        from switchyard.http import response as _resp

        return getattr(_resp, name)

    if name == "Redirect":
        from switchyard.redirect import Redirect

        return Redirect

    if name == "AnyResponse":
        from switchyard.serving.negotiation import AnyResponse

        return AnyResponse

    if name in ("Context", "get_context"):
        from switchyard import context as _ctx

        return getattr(_ctx, name)

    if name in ("Endpoint", "Middleware", "Next"):
        from switchyard.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("After", "Before", "LogMiddleware", "TimeoutMiddleware"):
        import switchyard.middleware as _middleware

        return getattr(_middleware, name)

    if name in (
        "BadRequest",
        "ConfigurationError",
        "FrozenError",
        "HTTPError",
        "MethodNotAllowed",
        "MissingValue",
        "NotFound",
        "ParamNotFound",
        "PatternError",
        "SwitchyardError",
    ):
        from switchyard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
