"""Pydantic request/response schemas for apm_agent."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_trading.application.schemas import PositionOut


class RegisterAgentRequest(BaseModel):
    agent_name: str = Field(
        ...,
        max_length=128,
        validation_alias=AliasChoices("agent_name", "name"),
    )

    @field_validator("agent_name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("agent_name is required")
        return v


class AgentPublic(BaseModel):
    id: str
    agent_name: str
    public_address: str
    total_trades: int
    total_wins: int
    total_volume_trade: float
    total_profit: float
    created_at: datetime | None
    last_active_at: datetime | None

    @classmethod
    def from_orm_agent(cls, agent: AgentORM) -> "AgentPublic":
        return cls(
            id=str(agent.id),
            agent_name=agent.agent_name,
            public_address=agent.public_address,
            total_trades=agent.total_trades or 0,
            total_wins=agent.total_wins or 0,
            total_volume_trade=float(agent.total_volume_trade or 0),
            total_profit=float(agent.total_profit or 0),
            created_at=agent.created_at,
            last_active_at=agent.last_active_at,
        )


class AgentWithKey(AgentPublic):
    """Returned exactly once, at registration. The key is never shown again."""

    api_key: str

    @classmethod
    def from_orm_agent(cls, agent: AgentORM) -> "AgentWithKey":
        public = AgentPublic.from_orm_agent(agent)
        return cls(**public.model_dump(), api_key=agent.api_key)


class RegisterAgentResponse(BaseModel):
    agent: AgentWithKey


class LeaderboardEntry(BaseModel):
    id: str
    rank: int
    agent_name: str
    total_trades: int
    total_wins: int
    total_volume_trade: float
    total_profit: float
    last_active_at: datetime | None
    created_at: datetime | None


class LeaderboardResponse(BaseModel):
    agents: list[LeaderboardEntry]


class AgentProfileResponse(BaseModel):
    agent: AgentPublic
    positions: list[PositionOut]
