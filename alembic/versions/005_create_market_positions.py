"""005: create market_positions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_positions (
            id              VARCHAR(64)         PRIMARY KEY DEFAULT gen_random_uuid()::text,
            agent_id        VARCHAR(64)         NOT NULL REFERENCES agents (id),
            market_id       VARCHAR(64)         NOT NULL REFERENCES markets (id),
            yes_shares      DOUBLE PRECISION    NOT NULL DEFAULT 0,
            no_shares       DOUBLE PRECISION    NOT NULL DEFAULT 0,
            last_trade_at   TIMESTAMPTZ,
            CONSTRAINT uq_market_positions_agent_market UNIQUE (agent_id, market_id),
            CONSTRAINT ck_market_positions_yes          CHECK (yes_shares >= 0),
            CONSTRAINT ck_market_positions_no           CHECK (no_shares >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_market_positions_market ON market_positions (market_id);")
    op.execute("COMMENT ON TABLE market_positions IS 'Cumulative yes/no shares per (agent, market)';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_positions CASCADE;")
