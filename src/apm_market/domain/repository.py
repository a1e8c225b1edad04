# src/apm_market/domain/repository.py
"""Repository Protocol for market persistence.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def list_markets(
        self,
        db: AsyncSession,
        statuses: list[str],
    ) -> list[Market]: ...

    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

    async def get_market_for_update(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

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
    ) -> Market: ...

    async def add_liquidity(
        self,
        db: AsyncSession,
        market_id: str,
        stake: float,
    ) -> float | None: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        market_id: str,
        outcome: str,
    ) -> bool: ...
