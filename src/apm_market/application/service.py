"""MarketApplicationService: thin composition layer.

Reads run without an explicit transaction. `create_market` commits its own
insert; `list_markets` additionally records caller activity (best-effort).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.persistence import AgentRepository
from src.apm_common.enums import MarketStatus
from src.apm_common.errors import MarketNotFoundError
from src.apm_market.application.schemas import (
    CreateMarketRequest,
    HolderOut,
    HoldersResponse,
    MarketListResponse,
    MarketOut,
    MarketResponse,
)
from src.apm_market.domain.holders import build_holders
from src.apm_market.domain.repository import MarketRepositoryProtocol
from src.apm_market.infrastructure.persistence import MarketRepository
from src.apm_trading.infrastructure.positions_repository import PositionsRepository
from src.apm_trading.infrastructure.trades_repository import TradesRepository

logger = logging.getLogger(__name__)

_LISTED_STATUSES = [MarketStatus.OPEN.value, MarketStatus.RESOLVED.value]


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        agents: AgentRepository | None = None,
        positions: PositionsRepository | None = None,
        trades: TradesRepository | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._agents = agents or AgentRepository()
        self._positions = positions or PositionsRepository()
        self._trades = trades or TradesRepository()

    async def list_markets(self, db: AsyncSession, agent_id: str) -> MarketListResponse:
        markets = await self._repo.list_markets(db, _LISTED_STATUSES)
        await self._agents.touch_last_active(db, agent_id)
        return MarketListResponse(markets=[MarketOut.from_domain(m) for m in markets])

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketResponse:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketResponse(market=MarketOut.from_domain(market))

    async def create_market(
        self, db: AsyncSession, req: CreateMarketRequest
    ) -> MarketResponse:
        try:
            market = await self._repo.create_market(
                db,
                question=req.question,
                description=req.description,
                category=req.category,
                image_url=req.image_url,
                end_time=req.end_time,
                option_a=req.option_a,
                option_b=req.option_b,
                initial_yes_price=req.initial_yes_price,
                liquidity=req.liquidity,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Market created: id=%s question=%r", market.id, market.question)
        return MarketResponse(market=MarketOut.from_domain(market))

    async def get_holders(self, db: AsyncSession, market_id: str) -> HoldersResponse:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        rows = await self._positions.holder_rows(db, market_id)
        if not rows:
            return HoldersResponse(holders=[])
        tx_hashes = await self._trades.latest_tx_hashes(db, market_id)
        holders = build_holders(rows, tx_hashes)
        return HoldersResponse(holders=[HolderOut.from_domain(h) for h in holders])
