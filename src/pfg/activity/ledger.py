"""Session ledger: append-only receipts of play sessions.

Receipts are written once and never updated. The reward amount on a
receipt is always the final post-cap value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.games import Game
from pfg.db.models import GameSession


@dataclass(frozen=True)
class SessionReceipt:
    """A receipt before it is persisted."""

    address: str
    game: Game
    reward_amount: int
    created_at: datetime
    distance: float = 0.0
    best_duration: float = 0.0
    score: float = 0.0
    streak: int = 0
    duration_ms: int = 0
    idempotency_key: str | None = None


async def append_session(db: AsyncSession, receipt: SessionReceipt) -> GameSession:
    """Insert a receipt and flush so the row carries its id.

    Runs inside the caller's transaction; nothing is visible until commit.
    """
    if receipt.reward_amount < 0:
        msg = "reward_amount must be non-negative"
        raise ValueError(msg)

    row = GameSession(
        address=receipt.address,
        game=receipt.game.value,
        reward_amount=receipt.reward_amount,
        distance=receipt.distance,
        best_duration=receipt.best_duration,
        score=receipt.score,
        streak=receipt.streak,
        duration_ms=receipt.duration_ms,
        idempotency_key=receipt.idempotency_key,
        created_at=receipt.created_at,
    )
    db.add(row)
    await db.flush()
    return row


async def get_session_by_idempotency_key(
    db: AsyncSession, address: str, idempotency_key: str,
) -> GameSession | None:
    result = await db.execute(
        select(GameSession).where(
            GameSession.address == address,
            GameSession.idempotency_key == idempotency_key,
        )
    )
    return result.scalar_one_or_none()


async def sum_credited(
    db: AsyncSession,
    address: str,
    game: Game,
    since: datetime,
    until: datetime,
) -> tuple[int, int]:
    """Return (sum of reward_amount, session count) for (address, game) in [since, until)."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(GameSession.reward_amount), 0).label("credited"),
            func.count(GameSession.id).label("sessions"),
        ).where(
            GameSession.address == address,
            GameSession.game == game.value,
            GameSession.created_at >= since,
            GameSession.created_at < until,
        )
    )
    row = result.one()
    return int(row.credited), int(row.sessions)


async def credited_by_game(
    db: AsyncSession, address: str, since: datetime, until: datetime,
) -> dict[str, int]:
    """Per-game credited totals for one user in [since, until)."""
    result = await db.execute(
        select(GameSession.game, func.sum(GameSession.reward_amount).label("credited"))
        .where(
            GameSession.address == address,
            GameSession.created_at >= since,
            GameSession.created_at < until,
        )
        .group_by(GameSession.game)
    )
    return {row.game: int(row.credited or 0) for row in result.all()}
