"""
Chat API

Endpoints for the consultancy conversation.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..engine.session import (
    ConsultancySession,
    NoProjectError,
    SessionBusyError,
    TaskNotFoundError,
    get_consultancy_session,
)
from ..schemas.chat import ChatMessage, ChatRequest, SessionView
from ..tracer import trace_input, trace_output, trace_section

router = APIRouter(prefix="/project", tags=["chat"])


@router.get("/messages", response_model=List[ChatMessage])
async def list_messages(
    session: ConsultancySession = Depends(get_consultancy_session),
):
    """The conversation log, oldest first."""
    return session.chat_history


@router.post("/messages", response_model=SessionView)
async def send_message(
    data: ChatRequest,
    session: ConsultancySession = Depends(get_consultancy_session),
):
    """
    Send a message to the consultant.

    Used for typed messages and for clicks on suggested actions.
    A failed model call still returns 200: the log ends with an apology.
    """
    trace_section("Chat Request")
    trace_input("api.chat", "message", data.message)

    try:
        reply = await session.send_message(data.message)
    except NoProjectError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    trace_output("api.chat", "reply", reply.text)
    return session.snapshot()


@router.post("/tasks/{task_id}/complete", response_model=SessionView)
async def complete_task(
    task_id: str,
    session: ConsultancySession = Depends(get_consultancy_session),
):
    """Mark a task as completed by telling the consultant about it."""
    try:
        await session.complete_task(task_id)
    except (NoProjectError, TaskNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return session.snapshot()
