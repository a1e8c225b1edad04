"""Bounded retries for transactional units of work.

A unit is an async callable that opens its own transaction on the given
session; on a transient failure the transaction has already been rolled back
and the unit is simply run again. Anything else propagates on the first try.

Transient = serialization failure (40001), deadlock (40P01), or a dropped
connection (SQLAlchemy marks these `connection_invalidated`). A connection
dropped during COMMIT is not transient: the commit may have landed, so
`commit_unit` turns it into CommitOutcomeUnknownError and the unit is not re-run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.apm_common.errors import CommitOutcomeUnknownError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01"})


def is_transient(exc: BaseException) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _TRANSIENT_SQLSTATES


async def commit_unit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except DBAPIError as exc:
        if exc.connection_invalidated:
            logger.error("Connection lost during commit, outcome unknown: %s", exc.orig)
            raise CommitOutcomeUnknownError() from exc
        raise


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    attempts: int | None = None,
    backoff_seconds: float | None = None,
) -> T:
    max_attempts = max(1, attempts if attempts is not None else settings.DB_RETRY_ATTEMPTS)
    backoff = backoff_seconds if backoff_seconds is not None else settings.DB_RETRY_BACKOFF_SECONDS

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except DBAPIError as exc:
            if not is_transient(exc) or attempt == max_attempts:
                raise
            logger.warning(
                "Transient DB error (attempt %d/%d), retrying: %s",
                attempt,
                max_attempts,
                exc.orig,
            )
            await asyncio.sleep(backoff * attempt)
    raise AssertionError("unreachable")  # pragma: no cover
