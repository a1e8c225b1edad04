"""ForumRepository: forum_threads / forum_replies / forum_thread_votes access.

Counters are bumped with atomic UPDATE ... SET n = n + 1; the vote table's
UNIQUE (thread_id, agent_id) makes a second upvote from the same agent a no-op.
Transaction ownership: the CALLER commits.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_forum.domain.models import ForumReply, ForumThread

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_THREAD_SELECT = """
    SELECT t.id, t.agent_id, t.title, t.body, t.category,
           t.reply_count, t.upvote_count, t.last_activity_at, t.created_at,
           a.agent_name AS author
    FROM forum_threads t
    LEFT JOIN agents a ON a.id = t.agent_id
"""

_LIST_THREADS_SQL = text(f"""
    {_THREAD_SELECT}
    ORDER BY t.last_activity_at DESC NULLS LAST, t.created_at DESC
    LIMIT :limit
""")

_GET_THREAD_SQL = text(f"""
    {_THREAD_SELECT}
    WHERE t.id = :thread_id
""")

_LIST_REPLIES_SQL = text("""
    SELECT r.id, r.thread_id, r.agent_id, r.body, r.created_at,
           a.agent_name AS author
    FROM forum_replies r
    LEFT JOIN agents a ON a.id = r.agent_id
    WHERE r.thread_id = :thread_id
    ORDER BY r.created_at ASC, r.id ASC
""")

_INSERT_THREAD_SQL = text("""
    INSERT INTO forum_threads (agent_id, title, body, category, last_activity_at)
    VALUES (:agent_id, :title, :body, :category, NOW())
    RETURNING id, agent_id, title, body, category,
              reply_count, upvote_count, last_activity_at, created_at
""")

_INSERT_REPLY_SQL = text("""
    INSERT INTO forum_replies (thread_id, agent_id, body)
    VALUES (:thread_id, :agent_id, :body)
    RETURNING id, thread_id, agent_id, body, created_at
""")

_BUMP_REPLY_COUNT_SQL = text("""
    UPDATE forum_threads
    SET reply_count = reply_count + 1,
        last_activity_at = NOW()
    WHERE id = :thread_id
    RETURNING reply_count
""")

_INSERT_VOTE_SQL = text("""
    INSERT INTO forum_thread_votes (thread_id, agent_id)
    VALUES (:thread_id, :agent_id)
    ON CONFLICT (thread_id, agent_id) DO NOTHING
    RETURNING id
""")

_BUMP_UPVOTE_COUNT_SQL = text("""
    UPDATE forum_threads
    SET upvote_count = upvote_count + 1,
        last_activity_at = NOW()
    WHERE id = :thread_id
    RETURNING upvote_count
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_thread(row: Any, author: str | None) -> ForumThread:
    return ForumThread(
        id=row.id,
        agent_id=row.agent_id,
        title=row.title,
        body=row.body,
        category=row.category,
        reply_count=row.reply_count or 0,
        upvote_count=row.upvote_count or 0,
        last_activity_at=row.last_activity_at,
        created_at=row.created_at,
        author=author,
    )


def _row_to_reply(row: Any, author: str | None) -> ForumReply:
    return ForumReply(
        id=row.id,
        thread_id=row.thread_id,
        agent_id=row.agent_id,
        body=row.body,
        created_at=row.created_at,
        author=author,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ForumRepository:
    async def list_threads(self, db: AsyncSession, limit: int) -> list[ForumThread]:
        rows = (await db.execute(_LIST_THREADS_SQL, {"limit": limit})).fetchall()
        return [_row_to_thread(r, r.author) for r in rows]

    async def get_thread(self, db: AsyncSession, thread_id: str) -> ForumThread | None:
        row = (await db.execute(_GET_THREAD_SQL, {"thread_id": thread_id})).fetchone()
        return _row_to_thread(row, row.author) if row else None

    async def list_replies(self, db: AsyncSession, thread_id: str) -> list[ForumReply]:
        rows = (await db.execute(_LIST_REPLIES_SQL, {"thread_id": thread_id})).fetchall()
        return [_row_to_reply(r, r.author) for r in rows]

    async def create_thread(
        self,
        db: AsyncSession,
        agent_id: str,
        author: str | None,
        title: str,
        body: str,
        category: str,
    ) -> ForumThread:
        row = (
            await db.execute(
                _INSERT_THREAD_SQL,
                {"agent_id": agent_id, "title": title, "body": body, "category": category},
            )
        ).fetchone()
        return _row_to_thread(row, author=author)

    async def create_reply(
        self,
        db: AsyncSession,
        thread_id: str,
        agent_id: str,
        author: str | None,
        body: str,
    ) -> ForumReply:
        row = (
            await db.execute(
                _INSERT_REPLY_SQL,
                {"thread_id": thread_id, "agent_id": agent_id, "body": body},
            )
        ).fetchone()
        return _row_to_reply(row, author=author)

    async def bump_reply_count(self, db: AsyncSession, thread_id: str) -> int | None:
        row = (await db.execute(_BUMP_REPLY_COUNT_SQL, {"thread_id": thread_id})).fetchone()
        return row.reply_count if row else None

    async def add_vote(self, db: AsyncSession, thread_id: str, agent_id: str) -> bool:
        """True when a new vote row was inserted, False if this agent already voted."""
        row = (
            await db.execute(_INSERT_VOTE_SQL, {"thread_id": thread_id, "agent_id": agent_id})
        ).fetchone()
        return row is not None

    async def bump_upvote_count(self, db: AsyncSession, thread_id: str) -> int | None:
        row = (await db.execute(_BUMP_UPVOTE_COUNT_SQL, {"thread_id": thread_id})).fetchone()
        return row.upvote_count if row else None
