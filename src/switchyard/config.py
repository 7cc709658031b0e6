"""Server configuration.

ServerConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(port=3000, log_requests=True, request_timeout=10.0)
    """

    # Bind
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Built-in middleware, prepended to the global chain on freeze
    log_requests: bool = False
    request_timeout: float | None = None  # seconds; None = no limit

    # Error bodies
    expose_errors: bool = True  # include exception messages in 500 bodies

    # Transport
    workers: int = 1
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None
