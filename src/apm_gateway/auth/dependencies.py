"""FastAPI dependencies: get_current_agent, require_admin.

Usage in any protected router:
    from src.apm_gateway.auth.dependencies import get_current_agent

    @router.post("/protected")
    async def protected(agent: AgentORM = Depends(get_current_agent)):
        ...

Agents authenticate with their API key, sent either as `x-api-key: <key>` or
`Authorization: Bearer <key>`. The header wins when both are present.
"""

import hmac

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_agent.infrastructure.persistence import AgentRepository
from src.apm_common.database import get_db_session
from src.apm_common.errors import (
    AdminKeyRequiredError,
    InvalidApiKeyError,
    MissingApiKeyError,
)

_repo = AgentRepository()


def extract_api_key(x_api_key: str | None, authorization: str | None) -> str:
    """Return the presented key or "" when none was sent."""
    header_key = (x_api_key or "").strip()
    if header_key:
        return header_key
    auth = authorization or ""
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return ""


async def get_current_agent(
    x_api_key: str | None = Header(None),
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db_session),
) -> AgentORM:
    """Resolve the API key to exactly one agent.

    Raises HTTP 401 (MissingApiKeyError) when no key is presented and
    HTTP 401 (InvalidApiKeyError) when the key matches no agent.
    """
    api_key = extract_api_key(x_api_key, authorization)
    if not api_key:
        raise MissingApiKeyError()

    agent = await _repo.get_by_api_key(db, api_key)
    if agent is None:
        raise InvalidApiKeyError()
    return agent


async def require_admin(x_admin_key: str | None = Header(None)) -> None:
    """Admin endpoints trust the caller unless ADMIN_API_KEY is configured."""
    expected = settings.ADMIN_API_KEY
    if not expected:
        return
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise AdminKeyRequiredError()
