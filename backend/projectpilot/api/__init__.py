# API Routes
from .project import router as project_router
from .chat import router as chat_router
from .events import router as events_router

__all__ = [
    "project_router",
    "chat_router",
    "events_router",
]
