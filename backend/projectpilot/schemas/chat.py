"""
Chat Schemas

Chat log entries and the session view returned by the API.
"""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import Field
from pydantic.alias_generators import to_camel

from .project import CamelModel, Project


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(CamelModel):
    """A message in the consultancy log. Never edited once appended."""
    sender: Literal["user", "ai"]
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


class ChatRequest(CamelModel):
    """Request to send a message to the consultant."""
    message: str = Field(..., min_length=1)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "forbid",
    }


class SessionView(CamelModel):
    """Everything the client needs to render."""
    project: Optional[Project] = None
    chat_history: List[ChatMessage] = Field(default_factory=list)
    is_loading: bool = False
