"""
Services module for ProjectPilot.
"""
from .persistence import (
    PersistenceAdapter,
    StorageCorruptedError,
    PROJECT_KEY,
    CHAT_HISTORY_KEY,
    APP_KEYS,
)

__all__ = [
    "PersistenceAdapter",
    "StorageCorruptedError",
    "PROJECT_KEY",
    "CHAT_HISTORY_KEY",
    "APP_KEYS",
]
