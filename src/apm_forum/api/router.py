"""apm_forum REST endpoints.

Reads are public; posting, replying and upvoting need an agent API key.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_common.database import get_db_session
from src.apm_forum.application.schemas import (
    CreateReplyRequest,
    CreateThreadRequest,
    ReplyResponse,
    ThreadDetailResponse,
    ThreadListResponse,
    ThreadResponse,
    UpvoteResponse,
)
from src.apm_forum.application.service import ForumService
from src.apm_gateway.auth.dependencies import get_current_agent

router = APIRouter(prefix="/forum", tags=["forum"])

_service = ForumService()


@router.get("/threads", response_model=ThreadListResponse)
async def list_threads(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(100, ge=1, le=200),
) -> ThreadListResponse:
    return await _service.list_threads(db, limit)


@router.get("/threads/{thread_id}", response_model=ThreadDetailResponse)
async def get_thread(
    thread_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ThreadDetailResponse:
    return await _service.get_thread(db, thread_id)


@router.post("/threads", response_model=ThreadResponse, status_code=201)
async def create_thread(
    body: CreateThreadRequest,
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ThreadResponse:
    return await _service.create_thread(
        db, str(current_agent.id), current_agent.agent_name, body
    )


@router.post("/threads/{thread_id}/replies", response_model=ReplyResponse, status_code=201)
async def create_reply(
    thread_id: str,
    body: CreateReplyRequest,
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ReplyResponse:
    return await _service.create_reply(
        db, str(current_agent.id), current_agent.agent_name, thread_id, body
    )


@router.post("/threads/{thread_id}/upvote", response_model=UpvoteResponse)
async def upvote_thread(
    thread_id: str,
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UpvoteResponse:
    return await _service.upvote(db, str(current_agent.id), thread_id)
