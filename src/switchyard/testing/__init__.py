"""Test utilities for switchyard servers.

Provides an ASGI-level test client::

    from switchyard.testing import TestClient
"""

from switchyard.testing.client import TestClient

__all__ = ["TestClient"]
