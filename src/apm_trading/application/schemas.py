# src/apm_trading/application/schemas.py
import math
from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from src.apm_trading.domain.models import Position, Trade


class PlaceTradeRequest(BaseModel):
    market_id: str = Field(..., validation_alias=AliasChoices("market_id", "marketId"))
    side: str | None = None
    option: str | None = Field(
        None, validation_alias=AliasChoices("option", "outcome", "label")
    )
    stake: float

    @field_validator("side", "option", mode="before")
    @classmethod
    def ignore_non_string(cls, v: object) -> str | None:
        """A non-string side/option counts as absent so the other field can decide."""
        return v if isinstance(v, str) else None

    @field_validator("market_id")
    @classmethod
    def market_id_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("market_id is required")
        return v

    @field_validator("stake")
    @classmethod
    def stake_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("stake must be a positive number")
        return v


class TradeOut(BaseModel):
    id: str
    agent_id: str
    market_id: str
    side: str
    price: float
    shares: float
    stake: float
    tx_hash: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeOut":
        return cls(
            id=t.id,
            agent_id=t.agent_id,
            market_id=t.market_id,
            side=t.side,
            price=t.price,
            shares=t.shares,
            stake=t.stake,
            tx_hash=t.tx_hash,
            created_at=t.created_at,
        )


class PositionOut(BaseModel):
    id: str
    agent_id: str
    market_id: str
    yes_shares: float
    no_shares: float
    last_trade_at: datetime | None

    @classmethod
    def from_domain(cls, p: Position) -> "PositionOut":
        return cls(
            id=p.id,
            agent_id=p.agent_id,
            market_id=p.market_id,
            yes_shares=p.yes_shares,
            no_shares=p.no_shares,
            last_trade_at=p.last_trade_at,
        )


class PlaceTradeResponse(BaseModel):
    trade: TradeOut
    position: PositionOut
    on_chain_stake: float
    on_chain_stake_scale: float


class TradeListResponse(BaseModel):
    trades: list[TradeOut]
