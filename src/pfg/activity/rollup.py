"""Lifetime rollups per user, maintained with single-statement upserts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.calculator import sanitize_number
from pfg.db.models import User


@dataclass(frozen=True)
class LifetimeTotals:
    address: str
    reward_total: int
    distance_total: float
    best_duration: float


async def ensure_user(db: AsyncSession, address: str) -> None:
    """Create the user row on first sight. Idempotent."""
    await db.execute(
        pg_insert(User)
        .values(address=address)
        .on_conflict_do_nothing(index_elements=["address"])
    )


async def apply_rollup(
    db: AsyncSession,
    address: str,
    reward_delta: int = 0,
    distance_delta: float = 0.0,
    duration_candidate: float = 0.0,
) -> LifetimeTotals:
    """Fold one accepted session into the user's lifetime totals.

    reward and distance are additive, best_duration only ever grows. Runs as
    one INSERT ... ON CONFLICT DO UPDATE so concurrent applies for the same
    address cannot lose updates.
    """
    reward = max(0, int(reward_delta))
    distance = sanitize_number(distance_delta)
    duration = sanitize_number(duration_candidate)
    now = datetime.now(timezone.utc)

    stmt = pg_insert(User).values(
        address=address,
        reward_total=reward,
        distance_total=distance,
        best_duration=duration,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["address"],
        set_={
            "reward_total": User.reward_total + stmt.excluded.reward_total,
            "distance_total": User.distance_total + stmt.excluded.distance_total,
            "best_duration": func.greatest(User.best_duration, stmt.excluded.best_duration),
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(User.address, User.reward_total, User.distance_total, User.best_duration)

    row = (await db.execute(stmt)).one()
    return LifetimeTotals(
        address=row.address,
        reward_total=int(row.reward_total),
        distance_total=float(row.distance_total),
        best_duration=float(row.best_duration),
    )


async def get_lifetime(db: AsyncSession, address: str) -> LifetimeTotals:
    """Read a user's totals; an unknown address reads as all zeros."""
    result = await db.execute(
        select(User.reward_total, User.distance_total, User.best_duration).where(User.address == address)
    )
    row = result.one_or_none()
    if row is None:
        return LifetimeTotals(address=address, reward_total=0, distance_total=0.0, best_duration=0.0)
    return LifetimeTotals(
        address=address,
        reward_total=int(row.reward_total),
        distance_total=float(row.distance_total),
        best_duration=float(row.best_duration),
    )
