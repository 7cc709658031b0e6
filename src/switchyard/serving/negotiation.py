"""Return-value negotiation — maps handler results to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any, TypeAlias

from switchyard.http.response import Response, StreamingResponse
from switchyard.redirect import Redirect

AnyResponse: TypeAlias = Response | StreamingResponse


def negotiate(value: Any, current: AnyResponse) -> AnyResponse:
    """Convert a handler or middleware result to a response.

    Dispatch order:

    1. ``None``                -> *current* (the context's in-progress response)
    2. ``Response``            -> pass through
    3. ``StreamingResponse``   -> pass through
    4. ``Redirect``            -> redirect status with Location header
    5. ``str``                 -> 200, text/plain
    6. ``bytes``               -> 200, application/octet-stream
    7. ``dict`` / ``list``     -> 200, application/json
    8. ``(value, int)``        -> negotiate value, override status
    9. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case None:
            return current
        case Response() | StreamingResponse():
            return value
        case Redirect():
            return value.to_response()
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (inner, int() as status):
            return negotiate(inner, current).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner, current).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Return None, str, bytes, dict, list, Response, or Redirect."
            )
            raise TypeError(msg)
