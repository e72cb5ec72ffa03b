"""SSE streaming endpoint for change notifications."""

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from nginx_viewer.events.hub import SSE_SEPARATOR

if TYPE_CHECKING:
    from nginx_viewer.events.hub import BroadcastHub

router = APIRouter(tags=["events"])

# Keep-alives come from BroadcastHub; push the library's own ping out.
LIBRARY_PING_SECONDS = 24 * 60 * 60


@router.get("/events")
async def event_stream(request: Request) -> EventSourceResponse:
    """Stream change notifications via Server-Sent Events.

    Sends ``data: hello`` on connect, ``data: reload`` whenever the
    tracked file changes, and a ``: ping`` comment at the heartbeat
    interval. The stream stays open until the client disconnects.

    Args:
        request: FastAPI request object.

    Returns:
        SSE response stream.
    """
    hub: BroadcastHub = request.app.state.broadcast_hub

    return EventSourceResponse(
        hub.create_sse_generator(),
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
        ping=LIBRARY_PING_SECONDS,
        sep=SSE_SEPARATOR,
    )
