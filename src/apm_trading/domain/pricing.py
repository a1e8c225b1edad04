"""Fixed-price allocation with a liquidity-relative stake cap.

Each market has one static price pair derived from `initial_yes_price`:
    yes_price = initial_yes_price
    no_price  = 1 - yes_price
There is no price impact: every trade on a side executes at that side's price
and buys `stake / price` shares.

Stake cap (substitute for order-book depth):
    max_stake = min(price * liquidity * MAX_PAYOUT_MULTIPLE, ABSOLUTE_MAX_STAKE)  if liquidity > 0
    max_stake = ABSOLUTE_MAX_STAKE                                                otherwise
A stake exactly at the cap is accepted.
"""

import math

from src.apm_common.enums import TradeSide
from src.apm_common.errors import (
    InvalidArgumentError,
    InvalidMarketPricingError,
    StakeLimitExceededError,
)
from src.apm_market.domain.models import Market
from src.apm_trading.domain.models import TradeQuote


def resolve_side(
    side_raw: str | None,
    option_raw: str | None,
    option_a: str | None,
    option_b: str | None,
) -> TradeSide:
    """Explicit yes/no token first, then an exact (trimmed) option label."""
    normalized_side = (side_raw or "").strip().lower()
    if normalized_side in (TradeSide.YES.value, TradeSide.NO.value):
        return TradeSide(normalized_side)

    label = (option_raw or "").strip()
    if label:
        if label == (option_a or "").strip():
            return TradeSide.YES
        if label == (option_b or "").strip():
            return TradeSide.NO
        raise InvalidArgumentError("option must match option_a or option_b for this market")

    raise InvalidArgumentError(
        "You must provide either side ('yes'/'no') or a valid option label"
    )


def side_prices(market_id: str, initial_yes_price: object) -> tuple[float, float]:
    """Return (yes_price, no_price); corrupt pricing data is an internal invariant failure."""
    try:
        yes_price = float(initial_yes_price)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidMarketPricingError(market_id, initial_yes_price) from None
    if not math.isfinite(yes_price) or yes_price <= 0 or yes_price >= 1:
        raise InvalidMarketPricingError(market_id, initial_yes_price)
    return yes_price, 1 - yes_price


def max_stake_allowed(
    price: float,
    liquidity: float | None,
    absolute_max_stake: float,
    max_payout_multiple: float = 1.0,
) -> float:
    current_volume = float(liquidity or 0)
    if current_volume > 0:
        volume_based = price * current_volume * max_payout_multiple
    else:
        volume_based = absolute_max_stake
    return min(volume_based, absolute_max_stake)


def validate_stake(stake: float) -> None:
    if not math.isfinite(stake) or stake <= 0:
        raise InvalidArgumentError("stake must be a positive number")


def quote_trade(
    market: Market,
    side: TradeSide,
    stake: float,
    absolute_max_stake: float,
    max_payout_multiple: float = 1.0,
) -> TradeQuote:
    """Price a trade and enforce the stake cap. Raises before anything is written."""
    validate_stake(stake)
    yes_price, no_price = side_prices(market.id, market.initial_yes_price)
    price = yes_price if side is TradeSide.YES else no_price
    # 1 - yes_price can round to 1.0 for yes prices within float epsilon of 0
    if not 0 < price < 1:
        raise InvalidMarketPricingError(market.id, market.initial_yes_price)

    cap = max_stake_allowed(price, market.liquidity, absolute_max_stake, max_payout_multiple)
    if stake > cap:
        raise StakeLimitExceededError(stake, cap)

    return TradeQuote(
        side=side.value,
        price=price,
        stake=stake,
        shares=stake / price,
        max_stake_allowed=cap,
    )
