"""
Project Schemas

The project document: tasks, blockers, progress and priorities.
Serialized with camelCase keys, which is also the persisted format.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model using camelCase keys on the wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_document(self) -> dict:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class TaskStatus(str, Enum):
    """Lifecycle of a task."""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"

    @classmethod
    def _missing_(cls, value):
        # Accept compact spellings such as "NotStarted" or "in_progress"
        if isinstance(value, str):
            wanted = value.replace(" ", "").replace("_", "").lower()
            for member in cls:
                if member.value.replace(" ", "").lower() == wanted:
                    return member
        return None


class ResourceType(str, Enum):
    """Kinds of project resources."""
    TOOL = "Tool"
    LIBRARY = "Library"
    DOCUMENTATION = "Documentation"
    HUMAN_RESOURCE = "Human Resource"


class Task(CamelModel):
    """A unit of work. Subtasks are modelled but never populated."""
    id: str
    name: str
    description: str = ""
    status: TaskStatus = TaskStatus.NOT_STARTED
    subtasks: List["Task"] = Field(default_factory=list)


class Blocker(CamelModel):
    """Something in the way. Blockers are append-only."""
    id: str
    description: str
    resolved: bool = False


class Stakeholder(CamelModel):
    name: str
    role: str
    contact: str


class Resource(CamelModel):
    name: str
    type: ResourceType
    url: Optional[str] = None
    description: str


class Priorities(CamelModel):
    """Running totals; positive speed favours speed over quality, positive scope favours features over MVP."""
    speed: int = 0
    scope: int = 0


class Timeline(CamelModel):
    start_date: datetime
    target_date: Optional[datetime] = None


class Project(CamelModel):
    """
    The project document.

    One per session. Lives until an explicit reset; the locally
    persisted copy is the only durable state.
    """
    project_name: str
    project_type: str
    project_goals: List[str] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    progress: int = Field(0, ge=0, le=100)
    priorities: Priorities = Field(default_factory=Priorities)
    stakeholders: List[Stakeholder] = Field(default_factory=list)
    timeline: Timeline
    blockers: List[Blocker] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)
    suggested_actions: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_task_ids(self) -> "Project":
        seen = set()
        for task in self.tasks:
            if task.id in seen:
                raise ValueError(f"Duplicate task id: {task.id}")
            seen.add(task.id)
        return self

    def find_task(self, task_id: str) -> Optional[Task]:
        """Task with the given id, if any."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def open_blockers(self) -> List[Blocker]:
        """Blockers not yet resolved."""
        return [b for b in self.blockers if not b.resolved]


class ProjectCreateRequest(CamelModel):
    """Request to create the project from the creation form."""
    project_name: str = Field(..., min_length=1, max_length=255)
    project_type: str = Field(..., min_length=1, max_length=255)
    project_goals: str = Field(..., min_length=1)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "forbid",
    }
