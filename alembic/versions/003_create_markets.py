"""003: create markets table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE markets (
            id                  VARCHAR(64)         PRIMARY KEY DEFAULT gen_random_uuid()::text,
            question            VARCHAR(500)        NOT NULL,
            description         TEXT,
            category            VARCHAR(64),
            image_url           TEXT,
            end_time            TIMESTAMPTZ,
            option_a            VARCHAR(128)        NOT NULL DEFAULT 'Yes',
            option_b            VARCHAR(128)        NOT NULL DEFAULT 'No',
            initial_yes_price   DOUBLE PRECISION    NOT NULL DEFAULT 0.5,
            liquidity           DOUBLE PRECISION    NOT NULL DEFAULT 0,
            status              VARCHAR(16)         NOT NULL DEFAULT 'open',
            outcome             VARCHAR(128),
            resolved_at         TIMESTAMPTZ,
            created_at          TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_yes_price     CHECK (initial_yes_price > 0 AND initial_yes_price < 1),
            CONSTRAINT ck_markets_liquidity     CHECK (liquidity >= 0),
            CONSTRAINT ck_markets_status        CHECK (status IN ('open', 'resolved')),
            CONSTRAINT ck_markets_options_differ CHECK (BTRIM(option_a) <> BTRIM(option_b))
        );
    """)
    op.execute("CREATE INDEX idx_markets_status_created ON markets (status, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_markets_updated_at
            BEFORE UPDATE ON markets
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE markets IS 'Binary markets: fixed price pair, cumulative stake as liquidity';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
