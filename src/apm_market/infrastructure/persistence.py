"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Mutations are single atomic statements; `get_market_for_update` takes the
row lock that serializes trades and resolution on one market.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question, description, category, image_url, end_time,
    option_a, option_b, initial_yes_price, liquidity,
    status, outcome, resolved_at, created_at, updated_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE status = ANY(:statuses)
    ORDER BY created_at DESC, id DESC
""")

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO markets (
        question, description, category, image_url, end_time,
        option_a, option_b, initial_yes_price, liquidity, status
    ) VALUES (
        :question, :description, :category, :image_url, :end_time,
        :option_a, :option_b, :initial_yes_price, :liquidity, 'open'
    )
    RETURNING {_MARKET_COLUMNS}
""")

_ADD_LIQUIDITY_SQL = text("""
    UPDATE markets
    SET liquidity = liquidity + :stake
    WHERE id = :market_id
    RETURNING liquidity
""")

# Conditional write: only the first resolution of a market can succeed
_MARK_RESOLVED_SQL = text("""
    UPDATE markets
    SET outcome = :outcome,
        status = 'resolved',
        resolved_at = NOW()
    WHERE id = :market_id
      AND (outcome IS NULL OR btrim(outcome) = '')
    RETURNING id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    return Market(
        id=row.id,
        question=row.question,
        description=row.description,
        category=row.category,
        image_url=row.image_url,
        end_time=row.end_time,
        option_a=row.option_a,
        option_b=row.option_b,
        initial_yes_price=row.initial_yes_price,
        liquidity=row.liquidity,
        status=row.status,
        outcome=row.outcome,
        resolved_at=row.resolved_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_market_for_update(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        """Must run inside a transaction; the lock is held until commit/rollback."""
        result = await db.execute(_GET_MARKET_FOR_UPDATE_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_markets(
        self, db: AsyncSession, statuses: list[str]
    ) -> list[Market]:
        result = await db.execute(_LIST_MARKETS_SQL, {"statuses": statuses})
        return [_row_to_market(row) for row in result.fetchall()]

    async def create_market(
        self,
        db: AsyncSession,
        question: str,
        description: str | None,
        category: str | None,
        image_url: str | None,
        end_time: datetime | None,
        option_a: str,
        option_b: str,
        initial_yes_price: float,
        liquidity: float,
    ) -> Market:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "question": question,
                "description": description,
                "category": category,
                "image_url": image_url,
                "end_time": end_time,
                "option_a": option_a,
                "option_b": option_b,
                "initial_yes_price": initial_yes_price,
                "liquidity": liquidity,
            },
        )
        return _row_to_market(result.fetchone())

    async def add_liquidity(
        self, db: AsyncSession, market_id: str, stake: float
    ) -> float | None:
        """Atomically add stake to the market's volume; returns the new value."""
        row = (
            await db.execute(_ADD_LIQUIDITY_SQL, {"market_id": market_id, "stake": stake})
        ).fetchone()
        return row.liquidity if row else None

    async def mark_resolved(
        self, db: AsyncSession, market_id: str, outcome: str
    ) -> bool:
        """False when another resolution got there first (outcome already set)."""
        row = (
            await db.execute(_MARK_RESOLVED_SQL, {"market_id": market_id, "outcome": outcome})
        ).fetchone()
        return row is not None
