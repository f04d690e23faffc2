"""
Project API

Endpoints for creating, viewing and resetting the project.
"""
from fastapi import APIRouter, Depends, HTTPException

from ..engine.session import (
    ConsultancySession,
    ProjectCreationError,
    ProjectExistsError,
    SessionBusyError,
    get_consultancy_session,
)
from ..schemas.chat import SessionView
from ..schemas.project import ProjectCreateRequest

router = APIRouter(prefix="/project", tags=["project"])


@router.get("", response_model=SessionView)
async def get_project(
    session: ConsultancySession = Depends(get_consultancy_session),
):
    """Current project, chat log and loading flag. The project is null before creation."""
    return session.snapshot()


@router.post("", response_model=SessionView)
async def create_project(
    data: ProjectCreateRequest,
    session: ConsultancySession = Depends(get_consultancy_session),
):
    """
    Create the project.

    The consultant proposes 3-5 initial tasks and an opening message.
    """
    try:
        await session.create_project(
            name=data.project_name,
            project_type=data.project_type,
            goals=data.project_goals,
        )
    except (ProjectExistsError, SessionBusyError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ProjectCreationError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return session.snapshot()


@router.delete("")
async def reset_project(
    confirm: bool = False,
    session: ConsultancySession = Depends(get_consultancy_session),
):
    """
    Reset the project. All data will be lost.

    Requires ``?confirm=true``.
    """
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail="Resetting deletes the project and conversation; repeat with confirm=true",
        )

    try:
        await session.reset()
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"status": "reset"}
