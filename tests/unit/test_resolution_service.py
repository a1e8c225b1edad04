# tests/unit/test_resolution_service.py
"""Unit tests for ResolutionService.resolve_market using mock repositories."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from src.apm_common.errors import (
    InvalidArgumentError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
)
from src.apm_market.domain.models import Market
from src.apm_resolution.application.service import ResolutionService
from src.apm_trading.domain.models import Position, Trade

_NOW = datetime.now(UTC)


def _make_market(**kwargs) -> Market:
    defaults = dict(
        id="MKT-1", question="Q?", description=None, category=None, image_url=None,
        end_time=None, option_a="Yes", option_b="No", initial_yes_price=0.4,
        liquidity=30.0, status="open", outcome=None, resolved_at=None,
        created_at=_NOW, updated_at=_NOW,
    )
    defaults.update(kwargs)
    return Market(**defaults)


def _trade(tid, agent_id, side, shares, stake) -> Trade:
    return Trade(
        id=tid, agent_id=agent_id, market_id="MKT-1", side=side, price=0.4,
        shares=shares, stake=stake, tx_hash=None, created_at=_NOW,
    )


def _position(agent_id, yes=0.0, no=0.0) -> Position:
    return Position(
        id=f"P-{agent_id}", agent_id=agent_id, market_id="MKT-1",
        yes_shares=yes, no_shares=no, last_trade_at=_NOW,
    )


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def repos():
    markets = MagicMock()
    markets.get_market_for_update = AsyncMock(return_value=_make_market())
    markets.mark_resolved = AsyncMock(return_value=True)
    trades = MagicMock()
    trades.list_by_market = AsyncMock(return_value=[
        _trade("T1", "A1", "yes", 25.0, 10.0),
        _trade("T2", "A2", "no", 20 / 0.6, 20.0),
    ])
    positions = MagicMock()
    positions.list_by_market = AsyncMock(return_value=[
        _position("A1", yes=25.0),
        _position("A2", no=20 / 0.6),
    ])
    agents = MagicMock()
    agents.apply_settlement = AsyncMock(return_value=True)
    return markets, trades, positions, agents


@pytest.fixture
def svc(repos):
    markets, trades, positions, agents = repos
    return ResolutionService(markets=markets, trades=trades, positions=positions, agents=agents)


class TestResolveMarket:
    @pytest.mark.asyncio
    async def test_yes_outcome_settles_both_agents(self, db, svc, repos):
        markets, _, _, agents = repos

        resp = await svc.resolve_market(db, "MKT-1", " Yes ")

        assert resp.market_id == "MKT-1"
        assert resp.outcome == "Yes"
        assert resp.winning_side == "yes"
        assert resp.updated_agents == 2
        agents.apply_settlement.assert_has_awaits(
            [call(db, "A1", 15.0, 1), call(db, "A2", -20.0, 0)]
        )
        markets.mark_resolved.assert_awaited_once_with(db, "MKT-1", "Yes")
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_outcome(self, db, svc, repos):
        _, _, _, agents = repos

        resp = await svc.resolve_market(db, "MKT-1", "No")

        assert resp.winning_side == "no"
        profits = {c.args[1]: c.args[2] for c in agents.apply_settlement.await_args_list}
        assert profits["A1"] == -10.0
        assert profits["A2"] == pytest.approx(20 / 0.6 - 20.0)

    @pytest.mark.asyncio
    async def test_market_without_trades(self, db, svc, repos):
        markets, trades, positions, agents = repos
        trades.list_by_market = AsyncMock(return_value=[])
        positions.list_by_market = AsyncMock(return_value=[])

        resp = await svc.resolve_market(db, "MKT-1", "Yes")

        assert resp.updated_agents == 0
        agents.apply_settlement.assert_not_awaited()
        markets.mark_resolved.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_found(self, db, svc, repos):
        markets, _, _, _ = repos
        markets.get_market_for_update = AsyncMock(return_value=None)

        with pytest.raises(MarketNotFoundError):
            await svc.resolve_market(db, "MKT-X", "Yes")

    @pytest.mark.asyncio
    async def test_already_resolved_checked_before_outcome(self, db, svc, repos):
        markets, trades, _, agents = repos
        markets.get_market_for_update = AsyncMock(
            return_value=_make_market(outcome="Yes", status="resolved")
        )

        with pytest.raises(MarketAlreadyResolvedError):
            await svc.resolve_market(db, "MKT-1", "not-an-option")

        trades.list_by_market.assert_not_awaited()
        agents.apply_settlement.assert_not_awaited()
        markets.mark_resolved.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_outcome_is_not_resolved(self, db, svc, repos):
        markets, _, _, _ = repos
        markets.get_market_for_update = AsyncMock(return_value=_make_market(outcome="   "))

        resp = await svc.resolve_market(db, "MKT-1", "Yes")

        assert resp.winning_side == "yes"

    @pytest.mark.asyncio
    async def test_outcome_must_match_an_option(self, db, svc, repos):
        _, trades, _, agents = repos

        with pytest.raises(InvalidArgumentError):
            await svc.resolve_market(db, "MKT-1", "yes")  # options are case sensitive

        trades.list_by_market.assert_not_awaited()
        agents.apply_settlement.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_rolls_back(self, db, svc, repos):
        markets, _, _, _ = repos
        markets.mark_resolved = AsyncMock(return_value=False)

        with pytest.raises(MarketAlreadyResolvedError):
            await svc.resolve_market(db, "MKT-1", "Yes")

        db.commit.assert_not_awaited()
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_zero_delta_agents_not_updated(self, db, svc, repos):
        _, trades, positions, agents = repos
        # Break-even trade and no winning-side shares
        trades.list_by_market = AsyncMock(return_value=[_trade("T1", "A1", "yes", 40.0, 40.0)])
        positions.list_by_market = AsyncMock(return_value=[_position("A1", no=1.0)])

        resp = await svc.resolve_market(db, "MKT-1", "Yes")

        assert resp.updated_agents == 0
        agents.apply_settlement.assert_not_awaited()
