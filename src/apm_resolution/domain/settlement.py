"""Settlement aggregation: turn a market's trades and positions into per-agent deltas.

Profit comes from trades, wins come from positions:
    profit += shares - stake   for a trade on the winning side
    profit += -stake           for a trade on the losing side
    wins   += 1                for a position holding winning-side shares
Pure functions only; nothing here touches the database.
"""

import math
from dataclasses import dataclass

from src.apm_common.enums import TradeSide
from src.apm_trading.domain.models import Position, Trade

_VALID_SIDES = (TradeSide.YES.value, TradeSide.NO.value)


@dataclass
class AgentDelta:
    profit: float = 0.0
    wins: int = 0

    @property
    def is_zero(self) -> bool:
        return self.profit == 0 and self.wins == 0


def winning_side_for(outcome: str, option_a: str | None, option_b: str | None) -> TradeSide | None:
    """Map a trimmed outcome label to the side it settles, or None if it names neither option."""
    label = outcome.strip()
    if label == (option_a or "").strip():
        return TradeSide.YES
    if label == (option_b or "").strip():
        return TradeSide.NO
    return None


def trade_profit(trade: Trade, winning_side: TradeSide) -> float | None:
    """Profit contribution of one trade, or None when the row cannot be settled."""
    if trade.side not in _VALID_SIDES:
        return None
    try:
        shares = float(trade.shares)
        stake = float(trade.stake)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(shares) or not math.isfinite(stake) or stake <= 0:
        return None
    if trade.side == winning_side.value:
        return shares - stake
    return -stake


def compute_settlement(
    trades: list[Trade],
    positions: list[Position],
    winning_side: TradeSide,
) -> dict[str, AgentDelta]:
    deltas: dict[str, AgentDelta] = {}

    for trade in trades:
        if not trade.agent_id:
            continue
        profit = trade_profit(trade, winning_side)
        if profit is None:
            continue
        deltas.setdefault(trade.agent_id, AgentDelta()).profit += profit

    for position in positions:
        if not position.agent_id:
            continue
        if winning_side is TradeSide.YES:
            winning_shares = float(position.yes_shares or 0)
        else:
            winning_shares = float(position.no_shares or 0)
        if winning_shares > 0:
            deltas.setdefault(position.agent_id, AgentDelta()).wins += 1

    return deltas
