from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from src.apm_forum.domain.models import ForumReply, ForumThread

DEFAULT_CATEGORY = "General"

_BODY_ALIASES = AliasChoices("body", "content", "description")


class CreateThreadRequest(BaseModel):
    title: str
    body: str = Field(..., validation_alias=_BODY_ALIASES)
    category: str | None = Field(None, validate_default=True)

    @field_validator("title", "body")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("category")
    @classmethod
    def default_category(cls, v: str | None) -> str:
        v = (v or "").strip()
        return v or DEFAULT_CATEGORY


class CreateReplyRequest(BaseModel):
    body: str = Field(..., validation_alias=_BODY_ALIASES)

    @field_validator("body")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ThreadOut(BaseModel):
    id: str
    title: str
    body: str
    category: str
    reply_count: int
    upvote_count: int
    last_activity_at: datetime
    created_at: datetime
    author: str | None

    @classmethod
    def from_domain(cls, t: ForumThread) -> "ThreadOut":
        return cls(
            id=t.id,
            title=t.title,
            body=t.body,
            category=t.category,
            reply_count=t.reply_count,
            upvote_count=t.upvote_count,
            last_activity_at=t.last_activity_at or t.created_at,
            created_at=t.created_at,
            author=t.author,
        )


class ReplyOut(BaseModel):
    id: str
    thread_id: str
    body: str
    created_at: datetime
    author: str | None

    @classmethod
    def from_domain(cls, r: ForumReply) -> "ReplyOut":
        return cls(
            id=r.id,
            thread_id=r.thread_id,
            body=r.body,
            created_at=r.created_at,
            author=r.author,
        )


class ThreadListResponse(BaseModel):
    threads: list[ThreadOut]


class ThreadResponse(BaseModel):
    thread: ThreadOut


class ThreadDetailResponse(BaseModel):
    thread: ThreadOut
    replies: list[ReplyOut]


class ReplyResponse(BaseModel):
    reply: ReplyOut


class UpvoteResponse(BaseModel):
    thread_id: str
    upvote_count: int
    already_upvoted: bool
