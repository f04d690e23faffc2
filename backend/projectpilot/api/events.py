"""
Events API

Server-Sent Events endpoint the client uses to know when to re-render.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..events import EventPublisher, get_event_publisher

router = APIRouter(prefix="/project", tags=["events"])


@router.get("/events")
async def stream_events(
    request: Request,
    publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Stream session events using Server-Sent Events.

    Emitted when a user message is accepted, while the consultant is
    thinking, when the project changes, when a reply arrives, when a
    turn fails and when the project is created or reset.
    """
    async def event_generator():
        async for event in publisher.subscribe():
            if await request.is_disconnected():
                break
            yield event

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        }
    )
