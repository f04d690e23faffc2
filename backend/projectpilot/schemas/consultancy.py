"""
Consultancy Schemas

Structured output the LLM must return. These models are rendered to
JSON Schema for the prompt and used to validate the response; anything
that does not validate is a gateway failure.
"""
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .project import CamelModel, TaskStatus


# =======================================
# Project creation
# =======================================

class InitialTask(CamelModel):
    name: str
    description: str


class CreatedProject(CamelModel):
    project_name: str
    project_type: str
    project_goals: List[str]
    initial_tasks: List[InitialTask] = Field(
        ...,
        min_length=3,
        max_length=5,
        description="An initial list of 3-5 high-level tasks to start the project.",
    )


class ProjectCreationResult(CamelModel):
    """Response to the project-creation request."""
    project: CreatedProject
    opening_statement: str = Field(
        ...,
        description="A welcoming message for the user that confirms the project has been created and suggests a first step.",
    )
    suggested_actions: List[str] = Field(
        ...,
        description="An array of 2-3 initial actions or questions that the user can take.",
    )


# =======================================
# Next step
# =======================================

class TaskAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"
    COMPLETE = "complete"


class TaskUpdate(CamelModel):
    """One task change. ``name`` and ``action`` are always present."""
    task_id: Optional[str] = Field(
        None,
        description="ID of the task to update. For new tasks, use the task name as a temporary ID.",
    )
    name: str
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    action: TaskAction


class PriorityUpdate(CamelModel):
    speed: Optional[int] = Field(None, description="The change in speed vs. quality priority.")
    scope: Optional[int] = Field(None, description="The change in MVP vs. feature-rich priority.")


class BlockerUpdate(CamelModel):
    description: str


class ConsultancyUpdate(CamelModel):
    """
    How the project changes after one turn.

    Optional sections are None when absent, which means "no change";
    an explicit zero or empty list is a present value.
    """
    response_text: str = Field(..., description="The AI consultant's response to the user's message.")
    suggested_actions: List[str] = Field(
        ...,
        description="A new array of 2-3 suggested actions or questions for the user.",
    )
    progress_update: int = Field(
        ...,
        description="The number of percentage points the overall project progress has changed. This can be a positive or negative integer.",
    )
    priority_update: Optional[PriorityUpdate] = Field(
        None,
        description="How the user's message affects the project's priorities. Omit if no change.",
    )
    blockers: Optional[List[BlockerUpdate]] = Field(
        None,
        description="An array of new blockers identified. Otherwise, this should be empty or null.",
    )
    task_updates: Optional[List[TaskUpdate]] = Field(
        None,
        description="An array of updates to tasks: 'add', 'remove', 'update', or 'complete'.",
    )


class NextStepResult(CamelModel):
    """Response to the next-step request."""
    consultancy_update: ConsultancyUpdate
