"""
Session Event Publisher

Server-Sent Events (SSE) telling the client when to re-render: a user
message was accepted, the consultant is thinking, the project changed,
a reply arrived, or a turn failed.
"""
import asyncio
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import AsyncGenerator, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Session event types."""
    PROJECT_CREATED = "project_created"
    CREATION_FAILED = "creation_failed"
    USER_MESSAGE = "user_message"
    AWAITING_RESPONSE = "awaiting_response"
    PROJECT_UPDATED = "project_updated"
    AI_MESSAGE = "ai_message"
    TURN_FAILED = "turn_failed"
    SESSION_RESET = "session_reset"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SessionEvent:
    """A session event to be streamed to the client."""
    event_type: str
    message: str
    turn_id: str  # Groups events from the same turn
    timestamp: str = field(default_factory=_now_iso)
    data: Optional[Dict] = None

    def to_sse(self) -> str:
        """Format as SSE data line."""
        return f"data: {json.dumps(asdict(self))}\n\n"


class EventPublisher:
    """
    Fans session events out to every connected client.

    Usage:
        publisher = EventPublisher()

        # In API endpoint
        async for event in publisher.subscribe():
            yield event

        # In the orchestrator
        await publisher.publish(EventType.AI_MESSAGE, "Reply ready", turn_id)
    """

    def __init__(self):
        self._subscribers: List[asyncio.Queue] = []
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Yield SSE-formatted events until closed."""
        queue: asyncio.Queue = asyncio.Queue()

        async with self._lock:
            self._subscribers.append(queue)

        try:
            yield f"data: {json.dumps({'event_type': 'connected', 'message': 'Connected to event stream'})}\n\n"

            while True:
                event = await queue.get()
                if event is None:  # Shutdown signal
                    break
                yield event.to_sse()
        finally:
            async with self._lock:
                self._subscribers.remove(queue)

    async def publish(
        self,
        event_type: EventType,
        message: str,
        turn_id: str,
        data: Optional[Dict] = None,
    ) -> None:
        """Publish an event to all subscribers."""
        event = SessionEvent(
            event_type=event_type.value,
            message=message,
            turn_id=turn_id,
            data=data,
        )

        async with self._lock:
            for queue in self._subscribers:
                await queue.put(event)
            count = len(self._subscribers)

        logger.debug(f"Published {event_type.value} to {count} subscribers")

    async def close_all(self) -> None:
        """Close all subscriber connections."""
        async with self._lock:
            for queue in self._subscribers:
                await queue.put(None)


# Global publisher instance
_publisher: Optional[EventPublisher] = None


def get_event_publisher() -> EventPublisher:
    """Get or create the global event publisher."""
    global _publisher
    if _publisher is None:
        _publisher = EventPublisher()
    return _publisher
