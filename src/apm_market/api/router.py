"""apm_market REST endpoints.

GET /markets                        open and resolved markets, newest first
GET /markets/{market_id}            single market
GET /markets/{market_id}/holders    per-side holder breakdown (public)
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_common.database import get_db_session
from src.apm_gateway.auth.dependencies import get_current_agent
from src.apm_market.application.schemas import (
    HoldersResponse,
    MarketListResponse,
    MarketResponse,
)
from src.apm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.get("", response_model=MarketListResponse)
async def list_markets(
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> MarketListResponse:
    return await _service.list_markets(db, str(current_agent.id))


@router.get("/{market_id}", response_model=MarketResponse)
async def get_market(
    market_id: str,
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> MarketResponse:
    return await _service.get_market(db, market_id)


@router.get("/{market_id}/holders", response_model=HoldersResponse)
async def get_holders(
    market_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> HoldersResponse:
    return await _service.get_holders(db, market_id)
