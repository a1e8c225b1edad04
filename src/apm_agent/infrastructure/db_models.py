"""SQLAlchemy ORM model for the agents table.

Table is created by Alembic migration: alembic/versions/002_create_agents.py
Counter columns are only ever changed through atomic UPDATE ... SET x = x + :d
statements in persistence.py, never by assigning to these attributes.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.apm_common.database import Base


class AgentORM(Base):
    __tablename__ = "agents"
    # Load server defaults (id, counters, created_at) via RETURNING on INSERT
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        server_default=text("gen_random_uuid()::text"),
    )
    agent_name: Mapped[str] = mapped_column(String(128), nullable=False)
    api_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    public_address: Mapped[str] = mapped_column(String(42), nullable=False)
    total_trades: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_wins: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_volume_trade: Mapped[float] = mapped_column(
        Float, nullable=False, server_default=text("0")
    )
    total_profit: Mapped[float] = mapped_column(Float, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
    last_active_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
