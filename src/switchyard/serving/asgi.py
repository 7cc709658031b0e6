"""ASGI handler — translates ASGI scope/messages to switchyard types.

The only component besides the request type that touches raw ASGI.
Converts the scope to a typed Request, hands it to the server's
dispatcher, and sends the Response back through ASGI send().
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard._internal.invoke import invoke
from switchyard.http.request import Request
from switchyard.http.response import StreamingResponse
from switchyard.serving.negotiation import AnyResponse
from switchyard.serving.sender import send_response, send_streaming_response

Dispatch = Callable[[Request], Awaitable[AnyResponse]]


async def handle_request(scope: Scope, receive: Receive, send: Send, *, dispatch: Dispatch) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    head = request.method == "HEAD"
    response = await dispatch(request)

    if isinstance(response, StreamingResponse):
        await send_streaming_response(response, send, head=head)
    else:
        await send_response(response, send, head=head)


async def handle_lifespan(
    receive: Receive,
    send: Send,
    *,
    startup: Sequence[Callable[..., Any]] = (),
    shutdown: Sequence[Callable[..., Any]] = (),
) -> None:
    """Run the ASGI lifespan protocol.

    Runs startup hooks in registration order and reports failure to the
    transport instead of raising; shutdown hooks run in registration
    order once the transport asks for it.
    """
    while True:
        message = await receive()
        msg_type = message["type"]

        if msg_type == "lifespan.startup":
            try:
                for hook in startup:
                    await invoke(hook)
            except Exception as exc:
                await send({"type": "lifespan.startup.failed", "message": str(exc)})
                return
            await send({"type": "lifespan.startup.complete"})

        elif msg_type == "lifespan.shutdown":
            for hook in shutdown:
                await invoke(hook)
            await send({"type": "lifespan.shutdown.complete"})
            return
