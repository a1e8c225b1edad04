"""Pydantic schemas for apm_market requests and responses.

Prices are exposed per side: yes_price = initial_yes_price, no_price = 1 - yes_price.
`liquidity` is the cumulative traded stake and feeds the per-trade stake cap.
"""

import math
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from src.apm_market.domain.models import Holder, Market

# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------


class MarketOut(BaseModel):
    id: str
    question: str
    description: str | None
    category: str | None
    image_url: str | None
    end_time: datetime | None
    option_a: str
    option_b: str
    initial_yes_price: float
    yes_price: float
    no_price: float
    liquidity: float
    status: str
    outcome: str | None
    resolved_at: datetime | None
    created_at: datetime

    @classmethod
    def from_domain(cls, m: Market) -> "MarketOut":
        yes_price = float(m.initial_yes_price)
        return cls(
            id=m.id,
            question=m.question,
            description=m.description,
            category=m.category,
            image_url=m.image_url,
            end_time=m.end_time,
            option_a=m.option_a,
            option_b=m.option_b,
            initial_yes_price=yes_price,
            yes_price=yes_price,
            no_price=1 - yes_price,
            liquidity=float(m.liquidity or 0),
            status=m.status,
            outcome=m.outcome,
            resolved_at=m.resolved_at,
            created_at=m.created_at,
        )


class MarketListResponse(BaseModel):
    markets: list[MarketOut]


class MarketResponse(BaseModel):
    market: MarketOut


class CreateMarketRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    end_time: datetime | None = None
    option_a: str = "Yes"
    option_b: str = "No"
    initial_yes_price: float = 0.5
    liquidity: float = 0.0

    @field_validator("question", "option_a", "option_b")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("initial_yes_price")
    @classmethod
    def price_in_open_interval(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0 or v >= 1:
            raise ValueError("initial_yes_price must be strictly between 0 and 1")
        return v

    @field_validator("liquidity")
    @classmethod
    def liquidity_non_negative(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            raise ValueError("liquidity must be >= 0")
        return v

    @model_validator(mode="after")
    def options_differ(self) -> "CreateMarketRequest":
        if self.option_a == self.option_b:
            raise ValueError("option_a and option_b must differ")
        return self


# ---------------------------------------------------------------------------
# Holders
# ---------------------------------------------------------------------------


class HolderOut(BaseModel):
    agent_name: str
    side: str
    shares: float
    share_percent: float
    tx_hash: str | None

    @classmethod
    def from_domain(cls, h: Holder) -> "HolderOut":
        return cls(
            agent_name=h.agent_name,
            side=h.side,
            shares=h.shares,
            share_percent=h.share_percent,
            tx_hash=h.tx_hash,
        )


class HoldersResponse(BaseModel):
    holders: list[HolderOut]
