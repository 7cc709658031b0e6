"""Transport launcher.

Starts a pounce ASGI server with a live switchyard ``Server`` object.
Pounce owns the accept loop, connection handling and worker threads;
switchyard only hands it an ASGI callable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from switchyard.config import ServerConfig

logger = logging.getLogger("switchyard.server")

_WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


def listening_descriptors(config: ServerConfig) -> list[str]:
    """Human-readable addresses the server will listen on.

    One entry per bound address. Wildcard hosts are reported as they are
    configured; IPv6 literals are bracketed.
    """
    scheme = "https" if config.ssl_certfile else "http"
    host = config.host or "0.0.0.0"
    if ":" in host:
        host = f"[{host}]"
    descriptors = [f"{scheme}://{host}:{config.port}"]
    if config.host in _WILDCARD_HOSTS:
        descriptors.append(f"{scheme}://localhost:{config.port}")
    return descriptors


def run_server(app: object, config: ServerConfig) -> None:
    """Start a pounce server for *app* and block until it stops.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:server"``),
    but switchyard has a live ``Server`` object, so ``pounce.Server`` is
    used directly with the ASGI callable.

    Raises whatever pounce raises when the address cannot be bound.
    """
    from pounce.config import ServerConfig as PounceConfig
    from pounce.server import Server as PounceServer

    pounce_config = PounceConfig(
        host=config.host,
        port=config.port,
        workers=config.workers,
        ssl_certfile=config.ssl_certfile,
        ssl_keyfile=config.ssl_keyfile,
    )
    for descriptor in listening_descriptors(config):
        logger.info("listening on %s", descriptor)
    PounceServer(pounce_config, app).run()
