"""Activity ingestion: the primary submit path and the legacy add path.

submit_session() runs calculator -> cap enforcer -> ledger -> rollup inside
one transaction and commits once; any failure rolls everything back.

add_legacy_activity() predates structured sessions. It always updates the
rollup and logs a capped receipt on a best-effort basis: a failed receipt
is logged and dropped, the rollup update stands.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.calculator import REASON_OK, compute_reward, sanitize_number
from pfg.activity.cap_enforcer import reserve_daily_headroom
from pfg.activity.games import Game, coerce_game
from pfg.activity.ledger import (
    SessionReceipt,
    append_session,
    credited_by_game,
    get_session_by_idempotency_key,
    sum_credited,
)
from pfg.activity.rollup import LifetimeTotals, apply_rollup, ensure_user, get_lifetime
from pfg.activity.rules import RULES, rules_for
from pfg.activity.windows import day_start, next_day_start, utc_now
from pfg.db.models import GameSession

logger = structlog.get_logger()

# Legacy clamps, to stop absurd deltas from old clients.
LEGACY_MAX_REWARD = 50_000
LEGACY_MAX_DISTANCE = 1_000.0
MAX_BEST_DURATION_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class SessionClaim:
    game: str | None
    duration_ms: float
    score: float = 0.0
    distance: float = 0.0
    best_duration_seconds: float = 0.0
    streak: float = 0.0
    idempotency_key: str | None = None


@dataclass(frozen=True)
class SubmissionResult:
    game: Game
    earned_amount: int
    reason: str
    daily_cap: int
    remaining_after: int
    earned_today: int
    sessions_today: int
    lifetime: LifetimeTotals
    session_id: int | None
    duplicate: bool = False


@dataclass(frozen=True)
class LegacyActivity:
    add_reward: float = 0.0
    add_distance: float = 0.0
    best_duration_seconds: float = 0.0
    game: str | None = None
    score: float = 0.0
    duration_ms: float = 0.0
    streak: float = 0.0

    @property
    def looks_like_session(self) -> bool:
        """Compatibility heuristic: only structured-looking payloads get a receipt."""
        return bool((self.game or "").strip()) or self.score > 0 or self.duration_ms > 0


@dataclass(frozen=True)
class LegacyResult:
    lifetime: LifetimeTotals
    session_logged: bool


def _clamp(value: object, upper: float) -> float:
    return min(sanitize_number(value), upper)


async def _today(db: AsyncSession, address: str, game: Game, now: datetime) -> tuple[int, int]:
    return await sum_credited(db, address, game, day_start(now), next_day_start(now))


async def _replay(db: AsyncSession, address: str, existing: GameSession, now: datetime) -> SubmissionResult:
    """Answer a retried submission from its stored receipt without crediting again."""
    game = coerce_game(existing.game)
    rules = rules_for(game)
    earned_today, sessions_today = await _today(db, address, game, now)
    logger.info("duplicate_submission", address=address, session_id=existing.id)
    return SubmissionResult(
        game=game,
        earned_amount=existing.reward_amount,
        reason=REASON_OK,
        daily_cap=rules.daily_cap,
        remaining_after=max(0, rules.daily_cap - earned_today),
        earned_today=earned_today,
        sessions_today=sessions_today,
        lifetime=await get_lifetime(db, address),
        session_id=existing.id,
        duplicate=True,
    )


async def submit_session(
    db: AsyncSession,
    address: str,
    claim: SessionClaim,
    now: datetime | None = None,
) -> SubmissionResult:
    """Score, cap, record and roll up one play session atomically.

    Fairness rejections (too_short, score_too_high) return earned_amount=0
    and write no receipt. Cap exhaustion still writes a receipt, with the
    amount reduced to whatever headroom was left.
    """
    if now is None:
        now = utc_now()
    game = coerce_game(claim.game)
    rules = rules_for(game)

    try:
        await ensure_user(db, address)

        if claim.idempotency_key:
            existing = await get_session_by_idempotency_key(db, address, claim.idempotency_key)
            if existing is not None:
                result = await _replay(db, address, existing, now)
                await db.commit()
                return result

        quote = compute_reward(game, claim.score, claim.distance, claim.duration_ms)
        if not quote.accepted:
            earned_today, sessions_today = await _today(db, address, game, now)
            lifetime = await get_lifetime(db, address)
            await db.commit()
            logger.info("session_rejected", address=address, game=game.value, reason=quote.reason)
            return SubmissionResult(
                game=game,
                earned_amount=0,
                reason=quote.reason,
                daily_cap=rules.daily_cap,
                remaining_after=max(0, rules.daily_cap - earned_today),
                earned_today=earned_today,
                sessions_today=sessions_today,
                lifetime=lifetime,
                session_id=None,
            )

        reservation = await reserve_daily_headroom(db, address, game, quote.amount, now)
        best_duration = _clamp(claim.best_duration_seconds, MAX_BEST_DURATION_SECONDS)
        distance = sanitize_number(claim.distance)

        session = await append_session(db, SessionReceipt(
            address=address,
            game=game,
            reward_amount=reservation.amount,
            created_at=now,
            distance=distance,
            best_duration=best_duration,
            score=sanitize_number(claim.score),
            streak=int(sanitize_number(claim.streak)),
            duration_ms=int(sanitize_number(claim.duration_ms)),
            idempotency_key=claim.idempotency_key,
        ))
        lifetime = await apply_rollup(db, address, reservation.amount, distance, best_duration)
        earned_today, sessions_today = await _today(db, address, game, now)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # A concurrent retry with the same key won the insert race.
        if claim.idempotency_key:
            existing = await get_session_by_idempotency_key(db, address, claim.idempotency_key)
            if existing is not None:
                return await _replay(db, address, existing, now)
        raise
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "session_submitted",
        address=address,
        game=game.value,
        session_id=session.id,
        provisional=quote.amount,
        earned=reservation.amount,
    )
    return SubmissionResult(
        game=game,
        earned_amount=reservation.amount,
        reason=REASON_OK,
        daily_cap=rules.daily_cap,
        remaining_after=reservation.remaining_after,
        earned_today=earned_today,
        sessions_today=sessions_today,
        lifetime=lifetime,
        session_id=session.id,
    )


async def add_legacy_activity(
    db: AsyncSession,
    address: str,
    activity: LegacyActivity,
    now: datetime | None = None,
) -> LegacyResult:
    """Apply an old-style activity delta; the receipt is best-effort.

    A structured payload is capped like a submitted session and both its
    receipt and the rollup carry the capped amount. A bare delta (or one
    whose receipt write failed) credits the rollup with the clamped value.
    """
    if now is None:
        now = utc_now()

    reward = int(_clamp(activity.add_reward, LEGACY_MAX_REWARD))
    distance = _clamp(activity.add_distance, LEGACY_MAX_DISTANCE)
    best_duration = _clamp(activity.best_duration_seconds, MAX_BEST_DURATION_SECONDS)

    credited = reward
    session_logged = False
    if activity.looks_like_session:
        game = coerce_game(activity.game)
        await ensure_user(db, address)
        try:
            async with db.begin_nested():
                reservation = await reserve_daily_headroom(db, address, game, reward, now)
                await append_session(db, SessionReceipt(
                    address=address,
                    game=game,
                    reward_amount=reservation.amount,
                    created_at=now,
                    distance=distance,
                    best_duration=best_duration,
                    score=sanitize_number(activity.score),
                    streak=int(sanitize_number(activity.streak)),
                    duration_ms=int(sanitize_number(activity.duration_ms)),
                ))
            credited = reservation.amount
            session_logged = True
        except Exception:
            logger.warning("legacy_receipt_failed", address=address, exc_info=True)

    lifetime = await apply_rollup(db, address, credited, distance, best_duration)
    await db.commit()
    return LegacyResult(lifetime=lifetime, session_logged=session_logged)


async def get_activity_summary(
    db: AsyncSession, address: str, now: datetime | None = None,
) -> tuple[LifetimeTotals, dict[Game, int]]:
    """Lifetime totals plus today's credited amount for every game."""
    if now is None:
        now = utc_now()
    lifetime = await get_lifetime(db, address)
    by_game = await credited_by_game(db, address, day_start(now), next_day_start(now))
    today = {game: by_game.get(game.value, 0) for game in RULES}
    return lifetime, today
