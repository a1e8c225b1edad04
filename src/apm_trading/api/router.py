# src/apm_trading/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_common.database import get_db_session
from src.apm_gateway.auth.dependencies import get_current_agent
from src.apm_gateway.middleware.rate_limit import enforce_trade_rate_limit
from src.apm_trading.application.schemas import (
    PlaceTradeRequest,
    PlaceTradeResponse,
    TradeListResponse,
)
from src.apm_trading.application.service import TradingApplicationService

router = APIRouter(prefix="/trades", tags=["trades"])

_service = TradingApplicationService()


@router.post("", response_model=PlaceTradeResponse, status_code=201)
async def place_trade(
    req: PlaceTradeRequest,
    current_agent: Annotated[AgentORM, Depends(enforce_trade_rate_limit)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> PlaceTradeResponse:
    return await _service.place_trade(db, str(current_agent.id), req)


@router.get("", response_model=TradeListResponse)
async def list_trades(
    current_agent: Annotated[AgentORM, Depends(get_current_agent)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    market_id: str | None = Query(None, description="Filter by market ID"),
    limit: int = Query(50, ge=1, le=200),
) -> TradeListResponse:
    return await _service.list_trades(db, str(current_agent.id), market_id, limit)
