"""Holder breakdown for one market.

Each position contributes up to two holder rows, one per side with shares > 0.
share_percent is relative to the total shares held on the same side.
"""

from typing import Any

from src.apm_common.enums import TradeSide
from src.apm_market.domain.models import Holder

UNKNOWN_AGENT_NAME = "Unknown agent"


def build_holders(
    position_rows: list[dict[str, Any]],
    latest_tx_hashes: dict[tuple[str, str], str],
) -> list[Holder]:
    flat: list[tuple[str, str, str, float]] = []  # (agent_id, agent_name, side, shares)
    for row in position_rows:
        agent_id = row.get("agent_id")
        if not agent_id:
            continue
        agent_name = row.get("agent_name") or UNKNOWN_AGENT_NAME
        yes_shares = float(row.get("yes_shares") or 0)
        no_shares = float(row.get("no_shares") or 0)
        if yes_shares > 0:
            flat.append((agent_id, agent_name, TradeSide.YES.value, yes_shares))
        if no_shares > 0:
            flat.append((agent_id, agent_name, TradeSide.NO.value, no_shares))

    totals = {TradeSide.YES.value: 0.0, TradeSide.NO.value: 0.0}
    for _, _, side, shares in flat:
        totals[side] += shares

    holders = []
    for agent_id, agent_name, side, shares in flat:
        total = totals[side]
        holders.append(
            Holder(
                agent_name=agent_name,
                side=side,
                shares=shares,
                share_percent=(shares / total) * 100 if total > 0 else 0.0,
                tx_hash=latest_tx_hashes.get((agent_id, side)),
            )
        )
    return holders
