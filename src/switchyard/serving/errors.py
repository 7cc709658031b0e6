"""Error handling pipeline for switchyard requests.

Maps HTTPError exceptions and unexpected failures escaping the
middleware chain to Response objects. Nothing here re-raises.
"""

import logging

from switchyard.errors import HTTPError
from switchyard.http.request import Request
from switchyard.http.response import Response

logger = logging.getLogger("switchyard.server")

INTERNAL_ERROR_BODY = "Internal Server Error"


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a response with its status, detail and headers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = Response(body=exc.detail, status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, *, expose: bool = True) -> Response:
    """Handle unexpected exceptions as 500 errors.

    The body is the exception message when *expose* is true, otherwise a
    generic one. The traceback always goes to the log.
    """
    logger.exception("500 %s %s", request.method, request.path)
    body = str(exc) if expose else INTERNAL_ERROR_BODY
    return Response(body=body or INTERNAL_ERROR_BODY, status=500)
