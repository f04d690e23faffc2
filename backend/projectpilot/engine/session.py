"""
Consultancy Session

Drives the conversational cycle: optimistic user message, gateway call,
state merge, ai reply, persistence. One gateway call may be in flight
at a time; failures during a turn become an apology message instead of
an error.
"""
import logging
import uuid
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..config import settings
from ..database import async_session
from ..events import EventPublisher, EventType, get_event_publisher
from ..llm.base import LLMFailure
from ..llm.gateway import ConsultancyGateway
from ..schemas.chat import ChatMessage, SessionView, utcnow
from ..schemas.project import Project
from ..services.persistence import (
    CHAT_HISTORY_KEY,
    PROJECT_KEY,
    PersistenceAdapter,
    StorageCorruptedError,
)
from ..tracer import trace_input, trace_output, trace_section, trace_step
from .reducer import apply_update, build_project, reply_message

logger = logging.getLogger(__name__)

APOLOGY_TEXT = "Sorry, I encountered an error. Please try again."
COMPLETION_MESSAGE = 'I have just completed the task: "{name}".'

_history_adapter = TypeAdapter(List[ChatMessage])


class TurnState(str, Enum):
    """Where the session is in its request/response cycle."""
    IDLE = "idle"
    CREATING = "creating"
    AWAITING_RESPONSE = "awaiting_response"


class SessionError(Exception):
    """Base exception for session operations."""
    pass


class SessionBusyError(SessionError):
    """A gateway call is already in flight."""
    pass


class NoProjectError(SessionError):
    """The operation needs a project and there is none."""
    pass


class ProjectExistsError(SessionError):
    """A project already exists; it must be reset first."""
    pass


class TaskNotFoundError(SessionError):
    """No task with the given id."""
    pass


class ProjectCreationError(SessionError):
    """The model could not create the project. Nothing was created."""
    pass


class ConsultancySession:
    """
    Session state plus the operations that change it.

    State:
    - project: the project document, or None before creation
    - chat_history: append-only conversation log
    - state: idle, creating or awaiting_response

    Every successful transition is followed by an explicit save of the
    affected documents.
    """

    def __init__(
        self,
        store: PersistenceAdapter,
        gateway: ConsultancyGateway,
        publisher: Optional[EventPublisher] = None,
        history_window: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.gateway = gateway
        self.publisher = publisher
        self.history_window = settings.history_window if history_window is None else history_window
        self.clock = clock

        self.project: Optional[Project] = None
        self.chat_history: List[ChatMessage] = []
        self.state = TurnState.IDLE

    @property
    def is_loading(self) -> bool:
        return self.state is not TurnState.IDLE

    def snapshot(self) -> SessionView:
        return SessionView(
            project=self.project,
            chat_history=list(self.chat_history),
            is_loading=self.is_loading,
        )

    # -----------------------------------------
    # Persistence
    # -----------------------------------------

    async def restore(self) -> None:
        """
        Load the persisted project and chat log.

        Malformed text, or documents that parse but do not match the
        model, are treated as corrupted storage: logged, wiped, and the
        session starts empty. Nothing is kept in memory that is not also
        in the store.
        """
        self.project = None
        self.chat_history = []

        try:
            project_doc = await self.store.load(PROJECT_KEY)
            history_doc = await self.store.load(CHAT_HISTORY_KEY)
        except StorageCorruptedError as e:
            logger.error(f"Stored session is corrupted, starting fresh: {e}")
            return

        try:
            project = Project.model_validate(project_doc) if project_doc is not None else None
            history = _history_adapter.validate_python(history_doc or [])
        except ValidationError as e:
            logger.error(f"Stored session is corrupted, starting fresh: {e.error_count()} error(s)")
            await self.store.clear()
            return

        self.project = project
        self.chat_history = history

        if self.project is not None:
            logger.info(
                f"Restored project '{self.project.project_name}' "
                f"with {len(self.chat_history)} messages"
            )

    async def _persist(self) -> None:
        if self.project is not None:
            await self.store.save(PROJECT_KEY, self.project.to_document())
        else:
            await self.store.remove(PROJECT_KEY)

        if self.chat_history:
            await self.store.save(CHAT_HISTORY_KEY, [m.to_document() for m in self.chat_history])
        else:
            await self.store.remove(CHAT_HISTORY_KEY)

    # -----------------------------------------
    # Helpers
    # -----------------------------------------

    def _begin(self, state: TurnState) -> str:
        if self.is_loading:
            raise SessionBusyError(f"A request is already in flight ({self.state.value})")
        self.state = state
        return str(uuid.uuid4())[:8]

    def _timestamp(self) -> datetime:
        # Chat history stays time-ordered even if the clock steps back
        now = self.clock()
        if self.chat_history and now < self.chat_history[-1].timestamp:
            return self.chat_history[-1].timestamp
        return now

    def _append(self, sender: str, text: str) -> ChatMessage:
        message = ChatMessage(sender=sender, text=text, timestamp=self._timestamp())
        self.chat_history = [*self.chat_history, message]
        return message

    def _recent_history(self, history: Sequence[ChatMessage]) -> List[ChatMessage]:
        if self.history_window <= 0:
            return []
        return list(history[-self.history_window:])

    async def _publish(self, event_type: EventType, message: str, turn_id: str, data: Optional[dict] = None):
        if self.publisher is not None:
            await self.publisher.publish(event_type, message, turn_id, data=data)

    # -----------------------------------------
    # Operations
    # -----------------------------------------

    async def create_project(self, name: str, project_type: str, goals: str) -> Project:
        """
        Create the project from the creation form.

        Raises:
            ProjectExistsError: A project already exists
            SessionBusyError: Another call is in flight
            ProjectCreationError: The model failed; nothing was created
        """
        if self.project is not None:
            raise ProjectExistsError("A project already exists; reset it first")

        turn_id = self._begin(TurnState.CREATING)
        trace_section("Project Creation")
        trace_input("engine.session", "project_name", name)

        try:
            try:
                result = await self.gateway.create_project(name, project_type, goals)
            except LLMFailure as e:
                logger.error(f"Error creating project: {e}")
                failure = e
            else:
                failure = None
                now = self.clock()
                self.project = build_project(result, now)
                self.chat_history = [reply_message(result.opening_statement, now)]
                await self._persist()
        finally:
            self.state = TurnState.IDLE

        if failure is not None:
            await self._publish(EventType.CREATION_FAILED, "Failed to create project", turn_id)
            raise ProjectCreationError("Failed to create project. Please try again.") from failure

        logger.info(f"Created project '{self.project.project_name}' with {len(self.project.tasks)} tasks")
        trace_output("engine.session", "tasks", [t.name for t in self.project.tasks])
        await self._publish(
            EventType.PROJECT_CREATED,
            f"Project '{self.project.project_name}' created",
            turn_id,
            data={"task_count": len(self.project.tasks)},
        )
        return self.project

    async def send_message(self, text: str) -> ChatMessage:
        """
        Run one conversational turn.

        The user message is appended and saved before the gateway call.
        Returns the ai message appended at the end of the turn, which is
        the fixed apology when the gateway fails.

        Raises:
            NoProjectError: There is no project to talk about
            SessionBusyError: Another call is in flight
        """
        if self.project is None:
            raise NoProjectError("Create a project first")

        turn_id = self._begin(TurnState.AWAITING_RESPONSE)
        trace_section("Consultancy Turn")
        trace_input("engine.session", "message", text)

        try:
            preceding = self.chat_history
            self._append("user", text)
            await self._persist()
            await self._publish(EventType.USER_MESSAGE, text, turn_id)
            await self._publish(EventType.AWAITING_RESPONSE, "Thinking...", turn_id)

            try:
                result = await self.gateway.next_step(
                    text,
                    self.project,
                    self._recent_history(preceding),
                )
            except LLMFailure as e:
                logger.error(f"Error sending message: {e}")
                reply = self._append("ai", APOLOGY_TEXT)
                await self._persist()
                failed = True
            else:
                update = result.consultancy_update
                trace_step("engine.session", "Applying consultancy update")
                self.project = apply_update(self.project, update)
                reply = self._append("ai", update.response_text)
                await self._persist()
                failed = False
        finally:
            self.state = TurnState.IDLE

        if failed:
            await self._publish(EventType.TURN_FAILED, reply.text, turn_id)
        else:
            trace_output("engine.session", "progress", self.project.progress)
            await self._publish(
                EventType.PROJECT_UPDATED,
                "Project updated",
                turn_id,
                data={
                    "progress": self.project.progress,
                    "task_count": len(self.project.tasks),
                    "open_blockers": len(self.project.open_blockers()),
                },
            )
            await self._publish(EventType.AI_MESSAGE, reply.text, turn_id)
        return reply

    async def complete_task(self, task_id: str) -> ChatMessage:
        """
        Mark a task completed from the task list.

        There is no silent status change: completion is reported to the
        consultant as a user message and goes through the normal turn.
        """
        if self.project is None:
            raise NoProjectError("Create a project first")

        task = self.project.find_task(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")

        return await self.send_message(COMPLETION_MESSAGE.format(name=task.name))

    async def reset(self) -> None:
        """Forget the project and the conversation."""
        if self.is_loading:
            raise SessionBusyError("Cannot reset while a request is in flight")

        await self.store.clear()
        self.project = None
        self.chat_history = []
        logger.info("Session reset")
        await self._publish(EventType.SESSION_RESET, "Project reset", str(uuid.uuid4())[:8])


# Singleton session instance
_session: Optional[ConsultancySession] = None


def get_consultancy_session() -> ConsultancySession:
    """Get or create the application's session."""
    global _session
    if _session is None:
        _session = ConsultancySession(
            store=PersistenceAdapter(async_session),
            gateway=ConsultancyGateway(),
            publisher=get_event_publisher(),
        )
    return _session
