"""
Project State Reducer

Pure functions that merge a structured consultancy update into the
project document. Inputs are never mutated; callers compare documents
by identity to decide what to persist.
"""
import logging
from datetime import datetime
from typing import Container, Dict, Iterable, List, Optional

from ..ids import generate_id
from ..schemas.chat import ChatMessage
from ..schemas.consultancy import (
    ConsultancyUpdate,
    ProjectCreationResult,
    TaskAction,
    TaskUpdate,
)
from ..schemas.project import (
    Blocker,
    Priorities,
    Project,
    Task,
    TaskStatus,
    Timeline,
)

logger = logging.getLogger(__name__)

PROGRESS_MIN = 0
PROGRESS_MAX = 100


def clamp_progress(value: int) -> int:
    return max(PROGRESS_MIN, min(PROGRESS_MAX, value))


def _fresh_id(taken: Container[str]) -> str:
    new_id = generate_id()
    while new_id in taken:
        new_id = generate_id()
    return new_id


class TaskIndex:
    """
    Resolves task references coming from the model.

    Ids are canonical. Names form a secondary index that is consulted
    only when the id lookup misses; when several tasks share a name the
    most recently created one is chosen.
    """

    def __init__(self, tasks: Iterable[Task] = ()):
        self._by_id: Dict[str, Task] = {}
        self._by_name: Dict[str, List[str]] = {}
        self._created: Dict[str, int] = {}
        self._counter = 0
        for task in tasks:
            self.add(task)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._by_id

    def tasks(self) -> List[Task]:
        """Tasks in creation order."""
        return list(self._by_id.values())

    def add(self, task: Task) -> None:
        if task.id in self._by_id:
            raise ValueError(f"Duplicate task id: {task.id}")
        self._by_id[task.id] = task
        self._by_name.setdefault(task.name, []).append(task.id)
        self._created[task.id] = self._counter
        self._counter += 1

    def remove(self, task_id: str) -> None:
        task = self._by_id.pop(task_id)
        self._unlink_name(task.name, task_id)
        del self._created[task_id]

    def replace(self, task: Task) -> None:
        """Swap in a new version of an existing task, keeping its position."""
        previous = self._by_id[task.id]
        self._by_id[task.id] = task
        if previous.name != task.name:
            self._unlink_name(previous.name, task.id)
            self._by_name.setdefault(task.name, []).append(task.id)

    def resolve(self, task_id: Optional[str], name: str) -> Optional[Task]:
        """Id match first, then exact (case-sensitive) name match."""
        if task_id and task_id in self._by_id:
            return self._by_id[task_id]

        candidates = self._by_name.get(name)
        if not candidates:
            return None
        if len(candidates) > 1:
            logger.warning(
                f"Task name '{name}' is shared by {len(candidates)} tasks; "
                f"using the most recently created"
            )
        return self._by_id[max(candidates, key=self._created.__getitem__)]

    def _unlink_name(self, name: str, task_id: str) -> None:
        ids = self._by_name[name]
        ids.remove(task_id)
        if not ids:
            del self._by_name[name]


def _patch_task(task: Task, update: TaskUpdate) -> Task:
    """Partial patch: only non-empty values overwrite."""
    changes = {}
    if update.name:
        changes["name"] = update.name
    if update.description:
        changes["description"] = update.description
    if update.status:
        changes["status"] = update.status
    return task.model_copy(update=changes)


def reconcile_tasks(tasks: Iterable[Task], updates: Iterable[TaskUpdate]) -> List[Task]:
    """
    Apply task updates in order; later updates see earlier effects.

    References that match nothing are dropped without error.
    """
    index = TaskIndex(tasks)

    for update in updates:
        target = index.resolve(update.task_id, update.name)

        if update.action == TaskAction.ADD:
            if target is not None:
                logger.debug(f"Skipping add of existing task '{update.name}'")
                continue
            index.add(Task(
                id=_fresh_id(index),
                name=update.name,
                description=update.description or "",
                status=update.status or TaskStatus.NOT_STARTED,
            ))

        elif target is None:
            logger.debug(f"Dropping {update.action.value} for unknown task '{update.name}'")

        elif update.action == TaskAction.REMOVE:
            index.remove(target.id)

        else:  # update or complete
            index.replace(_patch_task(target, update))

    return index.tasks()


def apply_update(project: Project, update: ConsultancyUpdate) -> Project:
    """
    Merge one consultancy update into the project.

    Absent sections leave their fields unchanged, except suggested
    actions which are always replaced. Returns a new document.
    """
    draft = project.model_copy(deep=True)

    tasks = reconcile_tasks(draft.tasks, update.task_updates or [])

    blockers = list(draft.blockers)
    for new_blocker in update.blockers or []:
        blockers.append(Blocker(
            id=_fresh_id({b.id for b in blockers}),
            description=new_blocker.description,
        ))

    priorities = draft.priorities
    if update.priority_update is not None:
        priorities = Priorities(
            speed=priorities.speed + (update.priority_update.speed or 0),
            scope=priorities.scope + (update.priority_update.scope or 0),
        )

    return draft.model_copy(update={
        "tasks": tasks,
        "progress": clamp_progress(draft.progress + update.progress_update),
        "blockers": blockers,
        "priorities": priorities,
        "suggested_actions": list(update.suggested_actions),
    })


def build_project(result: ProjectCreationResult, now: datetime) -> Project:
    """Initial project document from a creation result."""
    created = result.project

    tasks: List[Task] = []
    for initial in created.initial_tasks:
        tasks.append(Task(
            id=_fresh_id({t.id for t in tasks}),
            name=initial.name,
            description=initial.description,
        ))

    return Project(
        project_name=created.project_name,
        project_type=created.project_type,
        project_goals=list(created.project_goals),
        tasks=tasks,
        progress=0,
        priorities=Priorities(speed=0, scope=0),
        timeline=Timeline(start_date=now),
        suggested_actions=list(result.suggested_actions),
    )


def reply_message(text: str, now: datetime) -> ChatMessage:
    """The ai chat message derived from a model response."""
    return ChatMessage(sender="ai", text=text, timestamp=now)
