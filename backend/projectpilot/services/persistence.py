"""
Persistence Adapter

Opaque get/set/clear over the local key-value store. Documents are
stored as JSON text under fixed keys. Malformed text wipes the store and
is reported as StorageCorruptedError so the caller can start fresh.
"""
import json
import logging
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.stored_value import StoredValue
from ..tracer import trace_step

logger = logging.getLogger(__name__)

PROJECT_KEY = "project"
CHAT_HISTORY_KEY = "chatHistory"

# Every key owned by the application; clear() removes exactly these
APP_KEYS = (PROJECT_KEY, CHAT_HISTORY_KEY)


class StorageCorruptedError(Exception):
    """Stored text was not valid JSON. The store has already been wiped."""
    pass


class PersistenceAdapter:
    """
    Key-value persistence for the project document and chat log.

    Each call runs in its own transaction, so a save is an atomic
    whole-document overwrite.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save(self, key: str, document: Any) -> None:
        """Serialize ``document`` to JSON text and store it under ``key``."""
        text = json.dumps(document)
        async with self.session_factory() as db:
            await db.merge(StoredValue(key=key, value=text))
            await db.commit()
        trace_step("services.persistence", f"saved '{key}' ({len(text)} chars)")

    async def load(self, key: str) -> Optional[Any]:
        """
        Load the document stored under ``key``.

        Returns None when the key is missing.

        Raises:
            StorageCorruptedError: The stored text was not valid JSON; every
                application key has been removed before raising
        """
        async with self.session_factory() as db:
            result = await db.execute(select(StoredValue.value).where(StoredValue.key == key))
            text = result.scalar_one_or_none()

        if text is None:
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load '{key}' from local storage: {e}")
            await self.clear()
            raise StorageCorruptedError(f"Stored '{key}' is not valid JSON") from e

    async def remove(self, key: str) -> None:
        """Delete one key. Missing keys are ignored."""
        async with self.session_factory() as db:
            await db.execute(delete(StoredValue).where(StoredValue.key == key))
            await db.commit()

    async def clear(self) -> None:
        """Remove every key used by the application."""
        async with self.session_factory() as db:
            await db.execute(delete(StoredValue).where(StoredValue.key.in_(APP_KEYS)))
            await db.commit()
        logger.info("Local storage cleared")
