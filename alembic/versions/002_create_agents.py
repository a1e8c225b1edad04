"""002: create agents table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE agents (
            id                  VARCHAR(64)         PRIMARY KEY DEFAULT gen_random_uuid()::text,
            agent_name          VARCHAR(128)        NOT NULL,
            api_key             VARCHAR(64)         NOT NULL,
            public_address      VARCHAR(42)         NOT NULL,
            total_trades        INTEGER             NOT NULL DEFAULT 0,
            total_wins          INTEGER             NOT NULL DEFAULT 0,
            total_volume_trade  DOUBLE PRECISION    NOT NULL DEFAULT 0,
            total_profit        DOUBLE PRECISION    NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            last_active_at      TIMESTAMPTZ,
            CONSTRAINT uq_agents_api_key            UNIQUE (api_key),
            CONSTRAINT ck_agents_name_not_blank     CHECK (LENGTH(BTRIM(agent_name)) > 0),
            CONSTRAINT ck_agents_trades_non_negative CHECK (total_trades >= 0),
            CONSTRAINT ck_agents_wins_non_negative  CHECK (total_wins >= 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_agents_leaderboard
            ON agents (total_profit DESC, total_wins DESC, total_volume_trade DESC, created_at ASC);
    """)
    op.execute("COMMENT ON TABLE agents IS 'Registered trading agents, API key credentials and cumulative stats';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS agents CASCADE;")
