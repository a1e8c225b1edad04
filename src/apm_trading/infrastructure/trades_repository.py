"""Trades table access. Append-only: there is no UPDATE or DELETE here."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_trading.domain.models import Trade

_TRADE_COLUMNS = "id, agent_id, market_id, side, price, shares, stake, tx_hash, created_at"

_INSERT_TRADE_SQL = text(f"""
    INSERT INTO trades (agent_id, market_id, side, price, shares, stake)
    VALUES (:agent_id, :market_id, :side, :price, :shares, :stake)
    RETURNING {_TRADE_COLUMNS}
""")

_LIST_BY_MARKET_SQL = text(f"""
    SELECT {_TRADE_COLUMNS}
    FROM trades
    WHERE market_id = :market_id
    ORDER BY created_at ASC, id ASC
""")

_LIST_BY_AGENT_SQL = text(f"""
    SELECT {_TRADE_COLUMNS}
    FROM trades
    WHERE agent_id = :agent_id
      AND (CAST(:market_id AS TEXT) IS NULL OR market_id = CAST(:market_id AS TEXT))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

# Newest first, so the first row seen per (agent, side) is the latest hash
_TX_HASHES_SQL = text("""
    SELECT agent_id, side, tx_hash
    FROM trades
    WHERE market_id = :market_id AND tx_hash IS NOT NULL
    ORDER BY created_at DESC
""")


def _row_to_trade(row: Any) -> Trade:
    return Trade(
        id=row.id,
        agent_id=row.agent_id,
        market_id=row.market_id,
        side=row.side,
        price=row.price,
        shares=row.shares,
        stake=row.stake,
        tx_hash=row.tx_hash,
        created_at=row.created_at,
    )


class TradesRepository:
    async def insert_trade(
        self,
        db: AsyncSession,
        agent_id: str,
        market_id: str,
        side: str,
        price: float,
        shares: float,
        stake: float,
    ) -> Trade:
        result = await db.execute(
            _INSERT_TRADE_SQL,
            {
                "agent_id": agent_id,
                "market_id": market_id,
                "side": side,
                "price": price,
                "shares": shares,
                "stake": stake,
            },
        )
        return _row_to_trade(result.fetchone())

    async def list_by_market(self, db: AsyncSession, market_id: str) -> list[Trade]:
        rows = (await db.execute(_LIST_BY_MARKET_SQL, {"market_id": market_id})).fetchall()
        return [_row_to_trade(r) for r in rows]

    async def list_by_agent(
        self,
        db: AsyncSession,
        agent_id: str,
        market_id: str | None,
        limit: int,
    ) -> list[Trade]:
        rows = (
            await db.execute(
                _LIST_BY_AGENT_SQL,
                {"agent_id": agent_id, "market_id": market_id, "limit": limit},
            )
        ).fetchall()
        return [_row_to_trade(r) for r in rows]

    async def latest_tx_hashes(
        self, db: AsyncSession, market_id: str
    ) -> dict[tuple[str, str], str]:
        """Map (agent_id, side) → most recent on-chain tx hash for this market."""
        rows = (await db.execute(_TX_HASHES_SQL, {"market_id": market_id})).fetchall()
        latest: dict[tuple[str, str], str] = {}
        for agent_id, side, tx_hash in rows:
            if not agent_id or side not in ("yes", "no") or not tx_hash:
                continue
            latest.setdefault((agent_id, side), tx_hash)
        return latest
