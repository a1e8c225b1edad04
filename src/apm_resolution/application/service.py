"""ResolutionService: single-shot market resolution and agent settlement.

Runs as one transaction holding the market row lock:
  lock market -> validate -> aggregate -> apply agent deltas -> mark resolved.
The final conditional UPDATE is the idempotency guard; if it matches no row
the whole unit rolls back with MarketAlreadyResolvedError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.persistence import AgentRepository
from src.apm_common.enums import MarketStatus
from src.apm_common.errors import (
    InvalidArgumentError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
)
from src.apm_common.retry import commit_unit, run_with_retry
from src.apm_market.domain.models import Market
from src.apm_market.domain.repository import MarketRepositoryProtocol
from src.apm_market.infrastructure.persistence import MarketRepository
from src.apm_resolution.application.schemas import ResolveMarketResponse
from src.apm_resolution.domain.settlement import compute_settlement, winning_side_for
from src.apm_trading.infrastructure.positions_repository import PositionsRepository
from src.apm_trading.infrastructure.trades_repository import TradesRepository

logger = logging.getLogger(__name__)


def _is_resolved(market: Market) -> bool:
    return bool((market.outcome or "").strip()) or market.status == MarketStatus.RESOLVED.value


class ResolutionService:
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

    async def resolve_market(
        self, db: AsyncSession, market_id: str, outcome: str
    ) -> ResolveMarketResponse:
        async def _unit() -> ResolveMarketResponse:
            try:
                result = await self._execute(db, market_id, outcome)
                await commit_unit(db)
            except Exception:
                await db.rollback()
                raise
            return result

        return await run_with_retry(_unit)

    async def _execute(
        self, db: AsyncSession, market_id: str, outcome: str
    ) -> ResolveMarketResponse:
        market = await self._markets.get_market_for_update(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if _is_resolved(market):
            raise MarketAlreadyResolvedError(market_id)

        normalized_outcome = outcome.strip()
        winning_side = winning_side_for(normalized_outcome, market.option_a, market.option_b)
        if winning_side is None:
            raise InvalidArgumentError("Outcome must match option_a or option_b for this market")

        trades = await self._trades.list_by_market(db, market_id)
        positions = await self._positions.list_by_market(db, market_id)
        deltas = compute_settlement(trades, positions, winning_side)

        updated_agents = 0
        # Sorted so concurrent settlements touching the same agents lock rows in one order
        for agent_id in sorted(deltas):
            delta = deltas[agent_id]
            if delta.is_zero:
                continue
            if await self._agents.apply_settlement(db, agent_id, delta.profit, delta.wins):
                updated_agents += 1
                logger.debug(
                    "Settled agent=%s market=%s profit=%.6f wins=%d",
                    agent_id,
                    market_id,
                    delta.profit,
                    delta.wins,
                )
            else:
                logger.warning(
                    "Settlement skipped missing agent=%s market=%s", agent_id, market_id
                )

        if not await self._markets.mark_resolved(db, market_id, normalized_outcome):
            raise MarketAlreadyResolvedError(market_id)

        logger.info(
            "Market resolved: market=%s outcome=%r winning_side=%s trades=%d updated_agents=%d",
            market_id,
            normalized_outcome,
            winning_side.value,
            len(trades),
            updated_agents,
        )
        return ResolveMarketResponse(
            market_id=market_id,
            outcome=normalized_outcome,
            winning_side=winning_side.value,
            updated_agents=updated_agents,
        )
