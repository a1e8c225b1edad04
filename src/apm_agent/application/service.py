"""AgentApplicationService: registration, leaderboard, own profile."""

import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.application.schemas import (
    AgentProfileResponse,
    AgentPublic,
    AgentWithKey,
    LeaderboardEntry,
    LeaderboardResponse,
    RegisterAgentResponse,
)
from src.apm_agent.domain.credentials import derive_public_address, generate_api_key
from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_agent.infrastructure.persistence import AgentRepository
from src.apm_trading.application.schemas import PositionOut
from src.apm_trading.infrastructure.positions_repository import PositionsRepository

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_LIMIT = 50
MAX_LEADERBOARD_LIMIT = 200


def normalize_limit(raw: str | None) -> int:
    """Missing, unparsable, non-finite or non-positive → 50; above 200 → 200; fractional → floor."""
    if raw is None or raw == "":
        return DEFAULT_LEADERBOARD_LIMIT
    try:
        n = float(raw)
    except ValueError:
        return DEFAULT_LEADERBOARD_LIMIT
    if not math.isfinite(n) or n <= 0:
        return DEFAULT_LEADERBOARD_LIMIT
    if n > MAX_LEADERBOARD_LIMIT:
        return MAX_LEADERBOARD_LIMIT
    return int(n)


class AgentApplicationService:
    def __init__(
        self,
        repo: AgentRepository | None = None,
        positions_repo: PositionsRepository | None = None,
    ) -> None:
        self._repo = repo or AgentRepository()
        self._positions = positions_repo or PositionsRepository()

    async def register(self, db: AsyncSession, agent_name: str) -> RegisterAgentResponse:
        """Insert a new agent with a fresh API key. Caller wraps in `db.begin()`."""
        api_key = generate_api_key()
        agent = await self._repo.create(
            db,
            agent_name=agent_name,
            api_key=api_key,
            public_address=derive_public_address(api_key),
        )
        logger.info("Agent registered: id=%s name=%r", agent.id, agent_name)
        return RegisterAgentResponse(agent=AgentWithKey.from_orm_agent(agent))

    async def leaderboard(self, db: AsyncSession, limit: int) -> LeaderboardResponse:
        rows = await self._repo.leaderboard(db, limit)
        entries = [
            LeaderboardEntry(
                id=r["id"],
                rank=idx + 1,
                agent_name=r["agent_name"] or "Unnamed agent",
                total_trades=r["total_trades"] or 0,
                total_wins=r["total_wins"] or 0,
                total_volume_trade=float(r["total_volume_trade"] or 0),
                total_profit=float(r["total_profit"] or 0),
                last_active_at=r["last_active_at"],
                created_at=r["created_at"],
            )
            for idx, r in enumerate(rows)
        ]
        return LeaderboardResponse(agents=entries)

    async def get_profile(self, db: AsyncSession, agent: AgentORM) -> AgentProfileResponse:
        positions = await self._positions.list_by_agent(db, str(agent.id))
        return AgentProfileResponse(
            agent=AgentPublic.from_orm_agent(agent),
            positions=[PositionOut.from_domain(p) for p in positions],
        )
