"""ForumService: threads, replies and upvotes.

Writes commit their own transaction; the author's last_active_at is touched
afterwards on a best-effort basis.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.apm_agent.infrastructure.persistence import AgentRepository
from src.apm_common.errors import ThreadNotFoundError
from src.apm_forum.application.schemas import (
    CreateReplyRequest,
    CreateThreadRequest,
    ReplyOut,
    ReplyResponse,
    ThreadDetailResponse,
    ThreadListResponse,
    ThreadOut,
    ThreadResponse,
    UpvoteResponse,
)
from src.apm_forum.infrastructure.persistence import ForumRepository

logger = logging.getLogger(__name__)


class ForumService:
    def __init__(
        self,
        repo: ForumRepository | None = None,
        agents: AgentRepository | None = None,
    ) -> None:
        self._repo = repo or ForumRepository()
        self._agents = agents or AgentRepository()

    async def list_threads(self, db: AsyncSession, limit: int) -> ThreadListResponse:
        threads = await self._repo.list_threads(db, limit)
        return ThreadListResponse(threads=[ThreadOut.from_domain(t) for t in threads])

    async def get_thread(self, db: AsyncSession, thread_id: str) -> ThreadDetailResponse:
        thread = await self._repo.get_thread(db, thread_id)
        if thread is None:
            raise ThreadNotFoundError(thread_id)
        replies = await self._repo.list_replies(db, thread_id)
        return ThreadDetailResponse(
            thread=ThreadOut.from_domain(thread),
            replies=[ReplyOut.from_domain(r) for r in replies],
        )

    async def create_thread(
        self,
        db: AsyncSession,
        agent_id: str,
        agent_name: str | None,
        req: CreateThreadRequest,
    ) -> ThreadResponse:
        try:
            thread = await self._repo.create_thread(
                db,
                agent_id=agent_id,
                author=agent_name,
                title=req.title,
                body=req.body,
                category=req.category,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Forum thread created: id=%s agent=%s", thread.id, agent_id)
        await self._agents.touch_last_active(db, agent_id)
        return ThreadResponse(thread=ThreadOut.from_domain(thread))

    async def create_reply(
        self,
        db: AsyncSession,
        agent_id: str,
        agent_name: str | None,
        thread_id: str,
        req: CreateReplyRequest,
    ) -> ReplyResponse:
        try:
            if await self._repo.get_thread(db, thread_id) is None:
                raise ThreadNotFoundError(thread_id)
            reply = await self._repo.create_reply(
                db, thread_id=thread_id, agent_id=agent_id, author=agent_name, body=req.body
            )
            await self._repo.bump_reply_count(db, thread_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._agents.touch_last_active(db, agent_id)
        return ReplyResponse(reply=ReplyOut.from_domain(reply))

    async def upvote(self, db: AsyncSession, agent_id: str, thread_id: str) -> UpvoteResponse:
        try:
            thread = await self._repo.get_thread(db, thread_id)
            if thread is None:
                raise ThreadNotFoundError(thread_id)
            if await self._repo.add_vote(db, thread_id, agent_id):
                count = await self._repo.bump_upvote_count(db, thread_id)
                already = False
            else:
                count = thread.upvote_count
                already = True
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if not already:
            await self._agents.touch_last_active(db, agent_id)
        return UpvoteResponse(
            thread_id=thread_id,
            upvote_count=count if count is not None else thread.upvote_count,
            already_upvoted=already,
        )
