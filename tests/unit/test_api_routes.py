# tests/unit/test_api_routes.py
"""HTTP-level tests: routing, auth, status codes and the error envelope.

The database session and the authenticated agent are replaced through
FastAPI dependency overrides; services run for real against mock repositories.
"""
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import settings
from src.apm_agent.api import router as agent_router_module
from src.apm_agent.application.service import AgentApplicationService
from src.apm_common.database import get_db_session
from src.apm_gateway.auth.dependencies import get_current_agent
from src.apm_market.api import router as market_router_module
from src.apm_market.application.service import MarketApplicationService
from src.apm_market.domain.models import Market
from src.apm_resolution.api import router as admin_router_module
from src.apm_resolution.application.service import ResolutionService
from src.apm_trading.api import router as trade_router_module
from src.apm_trading.application.service import TradingApplicationService
from src.apm_trading.domain.models import Position, Trade
from src.main import app

_NOW = datetime.now(UTC)


def _make_market(**kwargs) -> Market:
    defaults = dict(
        id="MKT-1", question="Q?", description=None, category=None, image_url=None,
        end_time=None, option_a="Yes", option_b="No", initial_yes_price=0.4,
        liquidity=0.0, status="open", outcome=None, resolved_at=None,
        created_at=_NOW, updated_at=_NOW,
    )
    defaults.update(kwargs)
    return Market(**defaults)


@pytest.fixture
def fake_db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def overrides(fake_db):
    agent = SimpleNamespace(id="A1", agent_name="alpha")
    app.dependency_overrides[get_db_session] = lambda: fake_db
    app.dependency_overrides[get_current_agent] = lambda: agent
    yield agent
    app.dependency_overrides.clear()


@pytest.fixture
def db_only(fake_db):
    app.dependency_overrides[get_db_session] = lambda: fake_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def market_repo(monkeypatch):
    repo = MagicMock()
    repo.get_market_for_update = AsyncMock(return_value=_make_market())
    repo.get_market_by_id = AsyncMock(return_value=_make_market())
    repo.add_liquidity = AsyncMock(return_value=40.0)
    repo.mark_resolved = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def trading(monkeypatch, market_repo):
    trades = MagicMock()
    trades.insert_trade = AsyncMock(side_effect=lambda db, **kw: Trade(
        id="T-1", tx_hash=None, created_at=_NOW, **kw
    ))
    positions = MagicMock()
    positions.apply_fill = AsyncMock(side_effect=lambda db, agent_id, market_id, side, shares: Position(
        id="P-1", agent_id=agent_id, market_id=market_id,
        yes_shares=shares if side == "yes" else 0.0,
        no_shares=shares if side == "no" else 0.0, last_trade_at=_NOW,
    ))
    agents = MagicMock()
    agents.increment_trade_counters = AsyncMock(return_value=True)
    svc = TradingApplicationService(
        markets=market_repo, trades=trades, positions=positions, agents=agents
    )
    monkeypatch.setattr(trade_router_module, "_service", svc)
    monkeypatch.setattr(settings, "ABSOLUTE_MAX_STAKE", 1000.0)
    monkeypatch.setattr(settings, "MAX_PAYOUT_MULTIPLE", 1.0)
    monkeypatch.setattr(settings, "ONCHAIN_STAKE_SCALE", 1.0)
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
    return svc


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestTradesEndpoint:
    @pytest.mark.asyncio
    async def test_requires_api_key(self, client, db_only):
        resp = await client.post(
            "/api/v1/trades", json={"market_id": "MKT-1", "side": "yes", "stake": 1}
        )
        assert resp.status_code == 401
        body = resp.json()
        assert body["code"] == 1001
        assert body["error"] == "Missing API key"
        assert body["request_id"] == resp.headers["x-request-id"]

    @pytest.mark.asyncio
    async def test_places_trade(self, client, overrides, trading):
        resp = await client.post(
            "/api/v1/trades", json={"market_id": "MKT-1", "side": "yes", "stake": 40}
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["trade"]["shares"] == pytest.approx(100.0)
        assert body["trade"]["price"] == 0.4
        assert body["position"]["yes_shares"] == pytest.approx(100.0)
        assert body["on_chain_stake"] == 40.0
        assert body["on_chain_stake_scale"] == 1.0

    @pytest.mark.asyncio
    async def test_non_string_side_uses_option_label(self, client, overrides, trading):
        resp = await client.post(
            "/api/v1/trades",
            json={"market_id": "MKT-1", "side": 1, "option": "No", "stake": 6},
        )
        assert resp.status_code == 201
        assert resp.json()["trade"]["side"] == "no"

    @pytest.mark.asyncio
    async def test_invalid_stake_is_400(self, client, overrides, trading):
        resp = await client.post(
            "/api/v1/trades", json={"market_id": "MKT-1", "side": "yes", "stake": -3}
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == 2001
        assert "stake must be a positive number" in body["error"]

    @pytest.mark.asyncio
    async def test_over_cap_reports_max_stake(self, client, overrides, trading, market_repo):
        market_repo.get_market_for_update = AsyncMock(
            return_value=_make_market(initial_yes_price=0.5, liquidity=100.0)
        )
        resp = await client.post(
            "/api/v1/trades", json={"marketId": "MKT-1", "side": "yes", "stake": 51}
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == 4001
        assert body["details"] == {"max_stake_allowed": 50.0}

    @pytest.mark.asyncio
    async def test_unknown_market_is_404(self, client, overrides, trading, market_repo):
        market_repo.get_market_for_update = AsyncMock(return_value=None)
        resp = await client.post(
            "/api/v1/trades", json={"market_id": "NOPE", "side": "yes", "stake": 1}
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001


class TestMarketsEndpoint:
    @pytest.mark.asyncio
    async def test_holders_are_public(self, client, db_only, monkeypatch, market_repo):
        positions = MagicMock()
        positions.holder_rows = AsyncMock(return_value=[])
        svc = MarketApplicationService(repo=market_repo, positions=positions)
        monkeypatch.setattr(market_router_module, "_service", svc)

        resp = await client.get("/api/v1/markets/MKT-1/holders")

        assert resp.status_code == 200
        assert resp.json() == {"holders": []}

    @pytest.mark.asyncio
    async def test_list_requires_api_key(self, client, db_only):
        resp = await client.get("/api/v1/markets")
        assert resp.status_code == 401


class TestAdminEndpoint:
    @pytest.mark.asyncio
    async def test_admin_key_enforced_when_configured(self, client, db_only, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_API_KEY", "secret")
        resp = await client.post(
            "/api/v1/admin/resolve", json={"market_id": "MKT-1", "outcome": "Yes"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    @pytest.mark.asyncio
    async def test_resolve(self, client, db_only, monkeypatch, market_repo):
        monkeypatch.setattr(settings, "ADMIN_API_KEY", "secret")
        trades = MagicMock()
        trades.list_by_market = AsyncMock(return_value=[])
        positions = MagicMock()
        positions.list_by_market = AsyncMock(return_value=[])
        svc = ResolutionService(markets=market_repo, trades=trades, positions=positions)
        monkeypatch.setattr(admin_router_module, "_service", svc)

        resp = await client.post(
            "/api/v1/admin/resolve",
            json={"marketId": "MKT-1", "outcome": "No"},
            headers={"x-admin-key": "secret"},
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "market_id": "MKT-1", "outcome": "No", "winning_side": "no", "updated_agents": 0,
        }

    @pytest.mark.asyncio
    async def test_resolve_twice_is_400(self, client, db_only, monkeypatch, market_repo):
        monkeypatch.setattr(settings, "ADMIN_API_KEY", None)
        market_repo.get_market_for_update = AsyncMock(
            return_value=_make_market(status="resolved", outcome="Yes")
        )
        svc = ResolutionService(markets=market_repo)
        monkeypatch.setattr(admin_router_module, "_service", svc)

        resp = await client.post(
            "/api/v1/admin/resolve", json={"market_id": "MKT-1", "outcome": "Yes"}
        )

        assert resp.status_code == 400
        assert resp.json()["code"] == 3003


class TestAgentsEndpoint:
    @pytest.mark.asyncio
    async def test_register_blank_name_is_400(self, client, db_only):
        resp = await client.post("/api/v1/agents/register", json={"agent_name": "  "})
        assert resp.status_code == 400
        assert resp.json()["code"] == 2001

    @pytest.mark.asyncio
    async def test_leaderboard_bad_limit_defaults(self, client, db_only, monkeypatch):
        repo = MagicMock()
        repo.leaderboard = AsyncMock(return_value=[])
        monkeypatch.setattr(
            agent_router_module, "_service", AgentApplicationService(repo=repo)
        )

        resp = await client.get("/api/v1/agents/leaderboard?limit=abc")

        assert resp.status_code == 200
        assert resp.json() == {"agents": []}
        assert repo.leaderboard.call_args.args[1] == 50
