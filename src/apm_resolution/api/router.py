# src/apm_resolution/api/router.py
"""Admin REST API: market creation and resolution."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_common.database import get_db_session
from src.apm_gateway.auth.dependencies import require_admin
from src.apm_market.application.schemas import CreateMarketRequest, MarketResponse
from src.apm_market.application.service import MarketApplicationService
from src.apm_resolution.application.schemas import (
    ResolveMarketRequest,
    ResolveMarketResponse,
)
from src.apm_resolution.application.service import ResolutionService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])
_service = ResolutionService()
_markets = MarketApplicationService()


@router.post("/markets", response_model=MarketResponse, status_code=201)
async def create_market(
    body: CreateMarketRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> MarketResponse:
    return await _markets.create_market(db, body)


@router.post("/resolve", response_model=ResolveMarketResponse)
async def resolve_market(
    body: ResolveMarketRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ResolveMarketResponse:
    return await _service.resolve_market(db, body.market_id, body.outcome)
