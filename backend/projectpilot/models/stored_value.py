"""
Stored Value Model

One row per persisted key. Values are opaque JSON text; the application
reads and writes whole documents, never partial rows.
"""
from datetime import datetime, timezone
from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredValue(Base):
    """
    A single key-value entry of the local store.

    Keys in use:
    - project: the project document
    - chatHistory: the conversation log
    """
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<StoredValue(key={self.key}, size={len(self.value or '')})>"
