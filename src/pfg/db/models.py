"""ORM models matching the 001_baseline migration.

users                  lifetime rollups, one row per address
game_sessions          append-only session receipts (the ledger)
daily_reward_counters  per (address, game, day) lock anchor for cap enforcement
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pfg.db.base import Base


# ---------------------------------------------------------------------------
# Users (rollup store)
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table. Address is a wallet public key or 'tg:<id>'."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_address_created", "address", "created_at"),
    )

    address: Mapped[str] = mapped_column(String(128), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(32), nullable=True)
    display_name_normalized: Mapped[str | None] = mapped_column(String(32), nullable=True, unique=True)
    reward_total: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    distance_total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    best_duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )

    sessions: Mapped[list[GameSession]] = relationship(
        "GameSession", back_populates="user", passive_deletes=True,
    )


# ---------------------------------------------------------------------------
# Session ledger
# ---------------------------------------------------------------------------


class GameSession(Base):
    """Immutable receipt of one submitted play session. reward_amount is post-cap."""

    __tablename__ = "game_sessions"
    __table_args__ = (
        Index("idx_game_sessions_address_created", "address", "created_at"),
        Index("idx_game_sessions_game_created", "game", "created_at"),
        Index(
            "uq_game_sessions_address_idempotency",
            "address",
            "idempotency_key",
            unique=True,
            postgresql_where=text("idempotency_key IS NOT NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    address: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.address", ondelete="CASCADE"), nullable=False,
    )
    game: Mapped[str] = mapped_column(String(32), nullable=False, server_default="unknown")
    reward_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    distance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    best_duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    duration_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    idempotency_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )

    user: Mapped[User] = relationship("User", back_populates="sessions")


# ---------------------------------------------------------------------------
# Daily cap lock anchor
# ---------------------------------------------------------------------------


class DailyRewardCounter(Base):
    """Row locked FOR UPDATE while a submission reserves daily headroom.

    `credited` mirrors the day's ledger sum for display; enforcement always
    re-sums game_sessions under the lock.
    """

    __tablename__ = "daily_reward_counters"

    address: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.address", ondelete="CASCADE"), primary_key=True,
    )
    game: Mapped[str] = mapped_column(String(32), primary_key=True)
    day: Mapped[date] = mapped_column(Date, primary_key=True)
    credited: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
