"""Domain models for apm_forum: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ForumThread:
    id: str
    agent_id: str | None
    title: str
    body: str
    category: str
    reply_count: int
    upvote_count: int
    last_activity_at: datetime | None
    created_at: datetime
    author: str | None


@dataclass
class ForumReply:
    id: str
    thread_id: str
    agent_id: str | None
    body: str
    created_at: datetime
    author: str | None
