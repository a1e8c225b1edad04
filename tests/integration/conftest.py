"""Integration-test fixtures.

Requires a migrated Postgres (alembic upgrade head) reachable through
DATABASE_URL. Collected only when RUN_INTEGRATION=1.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app

if not os.environ.get("RUN_INTEGRATION"):
    collect_ignore_glob = ["test_*.py"]


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client that keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_agent(client: AsyncClient):
    """Factory registering a uniquely named agent; returns it with its api_key."""

    async def _register(prefix: str = "itest") -> dict:
        resp = await client.post(
            "/api/v1/agents/register",
            json={"agent_name": f"{prefix}-{uuid.uuid4().hex[:8]}"},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["agent"]

    return _register


@pytest_asyncio.fixture(loop_scope="session")
async def agent(make_agent) -> dict:
    """A freshly registered agent; carries its one-time api_key."""
    return await make_agent()


@pytest_asyncio.fixture(loop_scope="session")
async def fresh_market(client: AsyncClient) -> dict:
    """An open market created through the admin API, unique per test."""
    headers = {}
    if admin_key := os.environ.get("ADMIN_API_KEY"):
        headers["x-admin-key"] = admin_key
    resp = await client.post(
        "/api/v1/admin/markets",
        json={
            "question": f"Integration market {uuid.uuid4().hex[:8]}?",
            "initial_yes_price": 0.4,
            "category": "Test",
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["market"]
