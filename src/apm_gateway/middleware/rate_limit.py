"""Per-agent trade rate limiting.

Fixed one-minute window in Redis:
  key   = "ratelimit:trade:{agent_id}:{epoch_minute}"
  count = INCR key; EXPIRE key 60 on first hit
Over RATE_LIMIT_TRADES_PER_MINUTE → RateLimitError (429).

Disabled by default (RATE_LIMIT_ENABLED=False) so a Redis outage never
blocks trading unless an operator opted in.
"""

import time

from fastapi import Depends

from config.settings import settings
from src.apm_agent.infrastructure.db_models import AgentORM
from src.apm_common.errors import RateLimitError
from src.apm_common.redis_client import get_redis
from src.apm_gateway.auth.dependencies import get_current_agent

_WINDOW_SECONDS = 60


def window_key(agent_id: str, now: float | None = None) -> str:
    minute = int((now if now is not None else time.time()) // _WINDOW_SECONDS)
    return f"ratelimit:trade:{agent_id}:{minute}"


async def enforce_trade_rate_limit(
    agent: AgentORM = Depends(get_current_agent),
) -> AgentORM:
    """Dependency for the trade endpoint; passes the authenticated agent through."""
    if not settings.RATE_LIMIT_ENABLED:
        return agent

    redis = await get_redis()
    key = window_key(str(agent.id))
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, _WINDOW_SECONDS)
    if count > settings.RATE_LIMIT_TRADES_PER_MINUTE:
        raise RateLimitError()
    return agent
