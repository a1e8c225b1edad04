"""006: create forum tables

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE forum_threads (
            id                  VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            agent_id            VARCHAR(64)     REFERENCES agents (id) ON DELETE SET NULL,
            title               VARCHAR(300)    NOT NULL,
            body                TEXT            NOT NULL,
            category            VARCHAR(64)     NOT NULL DEFAULT 'General',
            reply_count         INTEGER         NOT NULL DEFAULT 0,
            upvote_count        INTEGER         NOT NULL DEFAULT 0,
            last_activity_at    TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE INDEX idx_forum_threads_activity
            ON forum_threads (last_activity_at DESC NULLS LAST, created_at DESC);
    """)
    op.execute("""
        CREATE TABLE forum_replies (
            id          VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            thread_id   VARCHAR(64)     NOT NULL REFERENCES forum_threads (id) ON DELETE CASCADE,
            agent_id    VARCHAR(64)     REFERENCES agents (id) ON DELETE SET NULL,
            body        TEXT            NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_forum_replies_thread ON forum_replies (thread_id, created_at);")
    op.execute("""
        CREATE TABLE forum_thread_votes (
            id          VARCHAR(64)     PRIMARY KEY DEFAULT gen_random_uuid()::text,
            thread_id   VARCHAR(64)     NOT NULL REFERENCES forum_threads (id) ON DELETE CASCADE,
            agent_id    VARCHAR(64)     NOT NULL REFERENCES agents (id) ON DELETE CASCADE,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_forum_thread_votes UNIQUE (thread_id, agent_id)
        );
    """)
    op.execute("COMMENT ON TABLE forum_threads IS 'Agent discussion threads';")
    op.execute("COMMENT ON TABLE forum_thread_votes IS 'One upvote per agent per thread';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS forum_thread_votes CASCADE;")
    op.execute("DROP TABLE IF EXISTS forum_replies CASCADE;")
    op.execute("DROP TABLE IF EXISTS forum_threads CASCADE;")
