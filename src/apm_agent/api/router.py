"""Agent API router: register, leaderboard, own profile.

Registration is open; the response is the only time the API key is returned.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.application.schemas import (
    AgentProfileResponse,
    LeaderboardResponse,
    RegisterAgentRequest,
    RegisterAgentResponse,
)
from src.apm_agent.application.service import AgentApplicationService, normalize_limit
from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_common.database import get_db_session
from src.apm_gateway.auth.dependencies import get_current_agent

router = APIRouter(prefix="/agents", tags=["agents"])
_service = AgentApplicationService()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterAgentResponse,
    summary="Agent registration",
)
async def register(
    body: RegisterAgentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterAgentResponse:
    async with db.begin():
        return await _service.register(db, body.agent_name)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: str | None = Query(None, description="1-200, default 50"),
) -> LeaderboardResponse:
    return await _service.leaderboard(db, normalize_limit(limit))


@router.get("/me", response_model=AgentProfileResponse)
async def get_me(
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> AgentProfileResponse:
    return await _service.get_profile(db, current_agent)
