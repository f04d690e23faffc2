# Engine Modules
from .reducer import TaskIndex, apply_update, build_project, reconcile_tasks, reply_message
from .session import (
    ConsultancySession,
    TurnState,
    SessionError,
    SessionBusyError,
    NoProjectError,
    ProjectExistsError,
    TaskNotFoundError,
    ProjectCreationError,
    get_consultancy_session,
)

__all__ = [
    "TaskIndex",
    "apply_update",
    "build_project",
    "reconcile_tasks",
    "reply_message",
    "ConsultancySession",
    "TurnState",
    "SessionError",
    "SessionBusyError",
    "NoProjectError",
    "ProjectExistsError",
    "TaskNotFoundError",
    "ProjectCreationError",
    "get_consultancy_session",
]
