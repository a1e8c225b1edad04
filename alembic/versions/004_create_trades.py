"""004: create trades table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trades (
            id          VARCHAR(64)         PRIMARY KEY DEFAULT gen_random_uuid()::text,
            agent_id    VARCHAR(64)         NOT NULL REFERENCES agents (id),
            market_id   VARCHAR(64)         NOT NULL REFERENCES markets (id),
            side        VARCHAR(3)          NOT NULL,
            price       DOUBLE PRECISION    NOT NULL,
            shares      DOUBLE PRECISION    NOT NULL,
            stake       DOUBLE PRECISION    NOT NULL,
            tx_hash     VARCHAR(80),
            created_at  TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_trades_side       CHECK (side IN ('yes', 'no')),
            CONSTRAINT ck_trades_price      CHECK (price > 0 AND price < 1),
            CONSTRAINT ck_trades_stake      CHECK (stake > 0),
            CONSTRAINT ck_trades_shares     CHECK (shares > 0)
        );
    """)
    op.execute("CREATE INDEX idx_trades_market_created ON trades (market_id, created_at DESC);")
    op.execute("CREATE INDEX idx_trades_agent_created ON trades (agent_id, created_at DESC);")
    op.execute("COMMENT ON TABLE trades IS 'Append-only trade log; tx_hash is filled by the on-chain relayer';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trades CASCADE;")
