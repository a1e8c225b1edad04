# src/apm_trading/infrastructure/positions_repository.py
"""market_positions access.

One row per (agent, market), enforced by UNIQUE (agent_id, market_id).
`apply_fill` is a single INSERT ... ON CONFLICT DO UPDATE that adds the new
shares to the stored totals inside PostgreSQL, so two concurrent fills for
the same pair both land.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_trading.domain.models import Position

_POSITION_COLUMNS = "id, agent_id, market_id, yes_shares, no_shares, last_trade_at"

_APPLY_FILL_SQL = text(f"""
    INSERT INTO market_positions (agent_id, market_id, yes_shares, no_shares, last_trade_at)
    VALUES (:agent_id, :market_id, :yes_shares, :no_shares, NOW())
    ON CONFLICT (agent_id, market_id) DO UPDATE
        SET yes_shares = market_positions.yes_shares + EXCLUDED.yes_shares,
            no_shares = market_positions.no_shares + EXCLUDED.no_shares,
            last_trade_at = EXCLUDED.last_trade_at
    RETURNING {_POSITION_COLUMNS}
""")

_LIST_BY_MARKET_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM market_positions
    WHERE market_id = :market_id
""")

_LIST_BY_AGENT_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM market_positions
    WHERE agent_id = :agent_id
      AND (yes_shares > 0 OR no_shares > 0)
    ORDER BY last_trade_at DESC NULLS LAST
""")

_HOLDER_ROWS_SQL = text("""
    SELECT p.agent_id, a.agent_name, p.yes_shares, p.no_shares
    FROM market_positions p
    LEFT JOIN agents a ON a.id = p.agent_id
    WHERE p.market_id = :market_id
""")


def _row_to_position(row: Any) -> Position:
    return Position(
        id=row.id,
        agent_id=row.agent_id,
        market_id=row.market_id,
        yes_shares=row.yes_shares,
        no_shares=row.no_shares,
        last_trade_at=row.last_trade_at,
    )


class PositionsRepository:
    async def apply_fill(
        self,
        db: AsyncSession,
        agent_id: str,
        market_id: str,
        side: str,
        shares: float,
    ) -> Position:
        """Create the position on first fill, else add to the traded side only."""
        is_yes = side == "yes"
        result = await db.execute(
            _APPLY_FILL_SQL,
            {
                "agent_id": agent_id,
                "market_id": market_id,
                "yes_shares": shares if is_yes else 0.0,
                "no_shares": 0.0 if is_yes else shares,
            },
        )
        return _row_to_position(result.fetchone())

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[Position]:
        rows = (await db.execute(_LIST_BY_MARKET_SQL, {"market_id": market_id})).fetchall()
        return [_row_to_position(r) for r in rows]

    async def list_by_agent(self, db: AsyncSession, agent_id: str) -> list[Position]:
        rows = (await db.execute(_LIST_BY_AGENT_SQL, {"agent_id": agent_id})).fetchall()
        return [_row_to_position(r) for r in rows]

    async def holder_rows(self, db: AsyncSession, market_id: str) -> list[dict[str, Any]]:
        rows = (await db.execute(_HOLDER_ROWS_SQL, {"market_id": market_id})).fetchall()
        return [
            {
                "agent_id": r.agent_id,
                "agent_name": r.agent_name,
                "yes_shares": r.yes_shares,
                "no_shares": r.no_shares,
            }
            for r in rows
        ]
