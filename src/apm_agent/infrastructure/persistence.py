"""AgentRepository: agents table access.

Registration and API key lookup go through the ORM mapping; every counter
mutation is an atomic UPDATE ... SET col = col + :delta so concurrent trades
and settlements never lose an increment.

Transaction ownership: the CALLER opens and commits the transaction.
"""

import logging
from typing import Any

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.db_models import AgentORM

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INCREMENT_TRADE_COUNTERS_SQL = text("""
    UPDATE agents
    SET total_trades = total_trades + 1,
        total_volume_trade = total_volume_trade + :stake,
        last_active_at = NOW()
    WHERE id = :agent_id
    RETURNING id, total_trades, total_volume_trade
""")

_APPLY_SETTLEMENT_SQL = text("""
    UPDATE agents
    SET total_profit = total_profit + :profit_delta,
        total_wins = total_wins + :win_delta
    WHERE id = :agent_id
    RETURNING id
""")

_TOUCH_LAST_ACTIVE_SQL = text(
    "UPDATE agents SET last_active_at = NOW() WHERE id = :agent_id"
)

_LEADERBOARD_SQL = text("""
    SELECT id, agent_name, total_trades, total_wins,
           total_volume_trade, total_profit, last_active_at, created_at
    FROM agents
    ORDER BY total_profit DESC NULLS LAST,
             total_wins DESC NULLS LAST,
             total_volume_trade DESC NULLS LAST,
             created_at ASC NULLS LAST
    LIMIT :limit
""")


class AgentRepository:
    async def create(
        self,
        db: AsyncSession,
        agent_name: str,
        api_key: str,
        public_address: str,
    ) -> AgentORM:
        agent = AgentORM(
            agent_name=agent_name,
            api_key=api_key,
            public_address=public_address,
        )
        db.add(agent)
        await db.flush()  # Populate id/counters/created_at without committing
        return agent

    async def get_by_api_key(self, db: AsyncSession, api_key: str) -> AgentORM | None:
        result = await db.execute(select(AgentORM).where(AgentORM.api_key == api_key))
        return result.scalar_one_or_none()

    async def increment_trade_counters(
        self, db: AsyncSession, agent_id: str, stake: float
    ) -> bool:
        row = (
            await db.execute(
                _INCREMENT_TRADE_COUNTERS_SQL,
                {"agent_id": str(agent_id), "stake": stake},
            )
        ).fetchone()
        return row is not None

    async def apply_settlement(
        self,
        db: AsyncSession,
        agent_id: str,
        profit_delta: float,
        win_delta: int,
    ) -> bool:
        row = (
            await db.execute(
                _APPLY_SETTLEMENT_SQL,
                {
                    "agent_id": agent_id,
                    "profit_delta": profit_delta,
                    "win_delta": win_delta,
                },
            )
        ).fetchone()
        return row is not None

    async def touch_last_active(self, db: AsyncSession, agent_id: str) -> None:
        """Best-effort: a failure here is logged and never surfaces to the caller."""
        try:
            await db.execute(_TOUCH_LAST_ACTIVE_SQL, {"agent_id": str(agent_id)})
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("last_active_at update failed for agent=%s: %s", agent_id, exc)

    async def leaderboard(self, db: AsyncSession, limit: int) -> list[dict[str, Any]]:
        rows = (await db.execute(_LEADERBOARD_SQL, {"limit": limit})).fetchall()
        return [_row_to_dict(r) for r in rows]


def _row_to_dict(row: Any) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "agent_name": row.agent_name,
        "total_trades": row.total_trades,
        "total_wins": row.total_wins,
        "total_volume_trade": row.total_volume_trade,
        "total_profit": row.total_profit,
        "last_active_at": row.last_active_at,
        "created_at": row.created_at,
    }
