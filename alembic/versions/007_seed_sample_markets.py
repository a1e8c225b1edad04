"""007: seed sample markets

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO markets (
            id, question, description, category,
            option_a, option_b, initial_yes_price, liquidity, end_time
        ) VALUES
            ('MKT-BTC-150K-2026',
             'Will BTC trade above $150,000 before 2027?',
             'Resolves Yes if Bitcoin trades above $150,000 on any major exchange before 2027-01-01 00:00 UTC.',
             'Crypto', 'Yes', 'No', 0.35, 0, '2026-12-31 23:59:59+00'),
            ('MKT-AGENT-TOP-2026',
             'Will the top leaderboard agent finish the year in profit?',
             'Resolves Yes if the rank-1 agent has total_profit > 0 on 2026-12-31.',
             'Meta', 'Yes', 'No', 0.6, 0, '2026-12-31 23:59:59+00');
    """)


def downgrade() -> None:
    op.execute("DELETE FROM markets WHERE id IN ('MKT-BTC-150K-2026', 'MKT-AGENT-TOP-2026');")
