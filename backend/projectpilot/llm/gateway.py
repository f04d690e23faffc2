"""
Consultancy Gateway

The two calls the application makes to the LLM: project creation and
next step. Both send a prompt plus a strict output schema and return a
validated result, or raise LLMFailure with nothing partial.
"""
import asyncio
import json
import logging
from typing import Optional, Sequence

from pydantic import BaseModel

from .base import LLMProvider, LLMFailure, LLMTimeoutError
from .router import get_llm_provider, get_model_for_task
from ..config import settings
from ..prompts.consultancy import CONSULTANT_SYSTEM, PROJECT_CREATION_PROMPT, NEXT_STEP_PROMPT
from ..schemas.chat import ChatMessage
from ..schemas.consultancy import NextStepResult, ProjectCreationResult
from ..schemas.project import Project
from ..tracer import traced, trace_input, trace_step

logger = logging.getLogger(__name__)


class ConsultancyGateway:
    """
    Boundary to the external model.

    Every failure mode (transport, non-success response, timeout,
    invalid JSON, schema mismatch) surfaces as LLMFailure.
    """

    def __init__(
        self,
        llm: Optional[LLMProvider] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.llm = llm or get_llm_provider()
        self.timeout = settings.llm_timeout_seconds if timeout is None else timeout
        self.max_retries = settings.llm_max_retries if max_retries is None else max_retries

    async def _extract(self, task: str, prompt: str, schema: type[BaseModel]):
        model = get_model_for_task(task)
        trace_step("llm.gateway", f"{task} -> model={model}, timeout={self.timeout}s")

        try:
            return await asyncio.wait_for(
                self.llm.extract_json(
                    prompt=prompt,
                    schema=schema,
                    model=model,
                    system_prompt=CONSULTANT_SYSTEM,
                    max_retries=self.max_retries,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"{task} timed out after {self.timeout}s")
            raise LLMTimeoutError(f"No response within {self.timeout}s") from e
        except LLMFailure as e:
            logger.error(f"{task} failed: {e}")
            raise
        except Exception as e:
            logger.exception(f"{task} failed unexpectedly")
            raise LLMFailure(f"Unexpected gateway error: {e}") from e

    @traced("llm.gateway")
    async def create_project(
        self,
        name: str,
        project_type: str,
        goals: str,
    ) -> ProjectCreationResult:
        """
        Ask the model to set up a new project.

        Args:
            name: Project name (non-empty)
            project_type: Kind of project, e.g. "Web App" (non-empty)
            goals: Free-text goals, typically comma separated (non-empty)

        Returns:
            Validated creation result with 3-5 initial tasks
        """
        if not (name and project_type and goals):
            raise ValueError("name, project_type and goals must be non-empty")

        trace_input("llm.gateway", "project_name", name)
        prompt = PROJECT_CREATION_PROMPT.format(
            name=name,
            project_type=project_type,
            goals=goals,
        )
        return await self._extract("project_creation", prompt, ProjectCreationResult)

    @traced("llm.gateway")
    async def next_step(
        self,
        message: str,
        project: Project,
        recent_history: Sequence[ChatMessage],
    ) -> NextStepResult:
        """
        Ask the model how the project changes after a user message.

        Args:
            message: The user's message
            project: Current project document
            recent_history: Messages preceding ``message``, oldest first

        Returns:
            Validated consultancy update
        """
        trace_input("llm.gateway", "message", message)
        prompt = NEXT_STEP_PROMPT.format(
            message=message,
            project_json=json.dumps(project.to_document(), indent=2),
            history_json=json.dumps([m.to_document() for m in recent_history], indent=2),
        )
        return await self._extract("next_step", prompt, NextStepResult)
