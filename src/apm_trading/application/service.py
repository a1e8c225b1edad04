# src/apm_trading/application/service.py
"""Pricing & trade engine.

One trade = one database transaction:
  1. lock the market row (SELECT ... FOR UPDATE)
  2. validate status, side, pricing and the stake cap (no writes yet)
  3. insert the trade
  4. upsert the position (atomic add)
  5. agent counters += (1 trade, stake volume)
  6. market liquidity += stake
Any failure rolls the whole unit back; transient DB errors re-run it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.apm_agent.infrastructure.persistence import AgentRepository
from src.apm_common.enums import MarketStatus
from src.apm_common.errors import InternalError, MarketNotFoundError, MarketNotOpenError
from src.apm_common.retry import commit_unit, run_with_retry
from src.apm_market.domain.repository import MarketRepositoryProtocol
from src.apm_market.infrastructure.persistence import MarketRepository
from src.apm_trading.application.schemas import (
    PlaceTradeRequest,
    PlaceTradeResponse,
    PositionOut,
    TradeListResponse,
    TradeOut,
)
from src.apm_trading.domain.models import Position, Trade
from src.apm_trading.domain.pricing import quote_trade, resolve_side
from src.apm_trading.infrastructure.positions_repository import PositionsRepository
from src.apm_trading.infrastructure.trades_repository import TradesRepository

logger = logging.getLogger(__name__)


class TradingApplicationService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        trades: TradesRepository | None = None,
        positions: PositionsRepository | None = None,
        agents: AgentRepository | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._trades = trades or TradesRepository()
        self._positions = positions or PositionsRepository()
        self._agents = agents or AgentRepository()

    async def place_trade(
        self, db: AsyncSession, agent_id: str, req: PlaceTradeRequest
    ) -> PlaceTradeResponse:
        async def _unit() -> tuple[Trade, Position]:
            try:
                filled = await self._execute(db, agent_id, req)
                await commit_unit(db)
            except Exception:
                await db.rollback()
                raise
            return filled

        trade, position = await run_with_retry(_unit)
        scale = settings.ONCHAIN_STAKE_SCALE
        return PlaceTradeResponse(
            trade=TradeOut.from_domain(trade),
            position=PositionOut.from_domain(position),
            on_chain_stake=trade.stake * scale,
            on_chain_stake_scale=scale,
        )

    async def _execute(
        self, db: AsyncSession, agent_id: str, req: PlaceTradeRequest
    ) -> tuple[Trade, Position]:
        market = await self._markets.get_market_for_update(db, req.market_id)
        if market is None:
            raise MarketNotFoundError(req.market_id)
        if market.status != MarketStatus.OPEN.value:
            raise MarketNotOpenError(market.id)

        side = resolve_side(req.side, req.option, market.option_a, market.option_b)
        quote = quote_trade(
            market,
            side,
            req.stake,
            absolute_max_stake=settings.ABSOLUTE_MAX_STAKE,
            max_payout_multiple=settings.MAX_PAYOUT_MULTIPLE,
        )

        trade = await self._trades.insert_trade(
            db,
            agent_id=agent_id,
            market_id=market.id,
            side=quote.side,
            price=quote.price,
            shares=quote.shares,
            stake=quote.stake,
        )
        position = await self._positions.apply_fill(
            db, agent_id=agent_id, market_id=market.id, side=quote.side, shares=quote.shares
        )
        if not await self._agents.increment_trade_counters(db, agent_id, quote.stake):
            raise InternalError(f"Agent {agent_id} disappeared mid-trade")
        if await self._markets.add_liquidity(db, market.id, quote.stake) is None:
            raise InternalError(f"Market {market.id} disappeared mid-trade")

        logger.info(
            "Trade executed: trade=%s agent=%s market=%s side=%s price=%.6f stake=%.6f shares=%.6f",
            trade.id,
            agent_id,
            market.id,
            quote.side,
            quote.price,
            quote.stake,
            quote.shares,
        )
        return trade, position

    async def list_trades(
        self,
        db: AsyncSession,
        agent_id: str,
        market_id: str | None,
        limit: int,
    ) -> TradeListResponse:
        trades = await self._trades.list_by_agent(db, agent_id, market_id, limit)
        return TradeListResponse(trades=[TradeOut.from_domain(t) for t in trades])
