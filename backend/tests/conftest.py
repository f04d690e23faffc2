"""Pytest fixtures for ProjectPilot."""
import json
from datetime import datetime, timezone
from typing import Optional

import pytest
import pytest_asyncio

from projectpilot.database import build_engine, build_session_factory, init_db
from projectpilot.engine.session import ConsultancySession
from projectpilot.events import EventPublisher
from projectpilot.llm.base import LLMFailure, LLMProvider
from projectpilot.llm.gateway import ConsultancyGateway
from projectpilot.schemas.consultancy import ConsultancyUpdate
from projectpilot.schemas.project import Project, Task, TaskStatus, Timeline
from projectpilot.services.persistence import PersistenceAdapter


class ScriptedProvider(LLMProvider):
    """
    LLM provider that replays queued responses.

    Queue items may be a str (returned as-is), a dict/list (returned as
    JSON), an exception (raised) or an async callable (awaited).
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate_text(
        self,
        prompt: str,
        model: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "model": model,
            "system_prompt": system_prompt,
            "json_output": json_output,
        })
        if not self.responses:
            raise LLMFailure("No scripted response left")

        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item()
        if isinstance(item, str):
            return item
        return json.dumps(item)


def creation_payload(task_count: int = 3) -> dict:
    names = ["Implement search", "Build favorites", "Design UI", "Set up CI", "Write docs", "Ship beta"]
    return {
        "project": {
            "projectName": "Recipe App",
            "projectType": "Mobile App",
            "projectGoals": ["search", "favorites"],
            "initialTasks": [
                {"name": name, "description": f"{name} for the app"}
                for name in names[:task_count]
            ],
        },
        "openingStatement": "Welcome aboard! Your Recipe App is set up. Let's start with search.",
        "suggestedActions": ["Plan the search feature", "Sketch the main screens"],
    }


def next_step_payload(**update) -> dict:
    body = {
        "responseText": "Got it.",
        "suggestedActions": ["Keep going"],
        "progressUpdate": 0,
    }
    body.update(update)
    return {"consultancyUpdate": body}


def make_update(**update) -> ConsultancyUpdate:
    return ConsultancyUpdate.model_validate(next_step_payload(**update)["consultancyUpdate"])


def make_project(*tasks: Task, progress: int = 0) -> Project:
    return Project(
        project_name="Recipe App",
        project_type="Mobile App",
        project_goals=["search", "favorites"],
        tasks=list(tasks),
        progress=progress,
        timeline=Timeline(start_date=datetime(2026, 1, 5, tzinfo=timezone.utc)),
        suggested_actions=["Plan the search feature"],
    )


def make_task(task_id: str, name: str, description: str = "", status: TaskStatus = TaskStatus.NOT_STARTED) -> Task:
    return Task(id=task_id, name=name, description=description, status=status)


@pytest_asyncio.fixture
async def engine(tmp_path):
    db_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(db_engine)
    try:
        yield db_engine
    finally:
        await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return PersistenceAdapter(session_factory)


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def gateway(provider):
    return ConsultancyGateway(llm=provider, timeout=5, max_retries=2)


@pytest.fixture
def publisher():
    return EventPublisher()


@pytest.fixture
def session(store, gateway, publisher):
    return ConsultancySession(store, gateway, publisher=publisher, history_window=4)
