"""Domain models for apm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Market:
    id: str
    question: str
    description: str | None
    category: str | None
    image_url: str | None
    end_time: datetime | None
    option_a: str           # "yes" side label
    option_b: str           # "no" side label
    initial_yes_price: float
    liquidity: float        # cumulative traded stake
    status: str
    outcome: str | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass
class Holder:
    """One (agent, side) holding in a market."""

    agent_name: str
    side: str
    shares: float
    share_percent: float
    tx_hash: str | None
