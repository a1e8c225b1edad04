"""Domain models for apm_trading: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Trade:
    """Immutable execution record. Rows are inserted once and never updated."""

    id: str
    agent_id: str
    market_id: str
    side: str
    price: float
    shares: float
    stake: float
    tx_hash: str | None
    created_at: datetime


@dataclass
class Position:
    """Cumulative holdings of one agent in one market."""

    id: str
    agent_id: str
    market_id: str
    yes_shares: float
    no_shares: float
    last_trade_at: datetime | None


@dataclass(frozen=True)
class TradeQuote:
    """Everything decided before the first write of a trade."""

    side: str
    price: float
    stake: float
    shares: float
    max_stake_allowed: float
