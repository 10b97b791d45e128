"""Activity ingestion API: submit, legacy add, me, rules."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.rules import RULES
from pfg.activity.schemas import (
    ActivityMeResponse,
    GameRulesResponse,
    GameTodayResponse,
    LegacyAddRequest,
    LegacyAddResponse,
    LifetimeTotalsResponse,
    SubmitSessionRequest,
    SubmitSessionResponse,
    TodayAggregateResponse,
)
from pfg.activity.rollup import LifetimeTotals
from pfg.activity.service import (
    LegacyActivity,
    SessionClaim,
    add_legacy_activity,
    get_activity_summary,
    submit_session,
)
from pfg.activity.windows import next_day_start
from pfg.auth.dependencies import get_current_address
from pfg.database import get_session

router = APIRouter(prefix="/api/v1/activity", tags=["Activity"])


def _short_address(address: str) -> str:
    if len(address) <= 10:
        return address
    return f"{address[:4]}…{address[-4:]}"


def _lifetime_response(totals: LifetimeTotals) -> LifetimeTotalsResponse:
    return LifetimeTotalsResponse(
        reward_total=totals.reward_total,
        distance_total=totals.distance_total,
        best_duration=totals.best_duration,
    )


@router.post("/submit", response_model=SubmitSessionResponse)
async def submit(
    body: SubmitSessionRequest,
    address: str = Depends(get_current_address),
    db: AsyncSession = Depends(get_session),
):
    """Submit one finished play session and credit its capped reward."""
    result = await submit_session(db, address, SessionClaim(
        game=body.game,
        duration_ms=body.duration_ms,
        score=body.score,
        distance=body.distance,
        best_duration_seconds=body.best_duration_seconds,
        streak=body.streak,
        idempotency_key=body.idempotency_key,
    ))
    return SubmitSessionResponse(
        earned_amount=result.earned_amount,
        reason=result.reason,
        daily_cap=result.daily_cap,
        remaining_after=result.remaining_after,
        today_aggregate=TodayAggregateResponse(
            game=result.game.value,
            earned_today=result.earned_today,
            sessions_today=result.sessions_today,
        ),
        lifetime_totals=_lifetime_response(result.lifetime),
        session_id=result.session_id,
        duplicate=result.duplicate,
    )


@router.post("/add", response_model=LegacyAddResponse)
async def add(
    body: LegacyAddRequest,
    address: str = Depends(get_current_address),
    db: AsyncSession = Depends(get_session),
):
    """Legacy delta endpoint kept for older clients."""
    result = await add_legacy_activity(db, address, LegacyActivity(
        add_reward=body.add_reward,
        add_distance=body.add_distance or body.distance,
        best_duration_seconds=body.best_duration_seconds,
        game=body.game,
        score=body.score,
        duration_ms=body.duration_ms,
        streak=body.streak,
    ))
    return LegacyAddResponse(
        address=_short_address(address),
        reward_total=result.lifetime.reward_total,
        distance_total=result.lifetime.distance_total,
        best_duration=result.lifetime.best_duration,
        session_logged=result.session_logged,
    )


@router.get("/me", response_model=ActivityMeResponse)
async def me(
    address: str = Depends(get_current_address),
    db: AsyncSession = Depends(get_session),
):
    """Lifetime totals and today's credit against each game's daily cap."""
    lifetime, today = await get_activity_summary(db, address)
    return ActivityMeResponse(
        address=address,
        lifetime_totals=_lifetime_response(lifetime),
        today=[
            GameTodayResponse(
                game=game.value,
                earned_today=earned,
                daily_cap=RULES[game].daily_cap,
                remaining=max(0, RULES[game].daily_cap - earned),
            )
            for game, earned in today.items()
        ],
        reset_at=next_day_start().isoformat(),
    )


@router.get("/rules", response_model=list[GameRulesResponse])
async def rules():
    """Public fairness parameters, one entry per game."""
    return [
        GameRulesResponse(
            game=game.value,
            min_duration_ms=r.min_duration_ms,
            per_run_cap=r.per_run_cap,
            daily_cap=r.daily_cap,
            per_minute_cap=r.per_minute_cap,
            max_score=r.max_score,
            max_score_per_minute=r.max_score_per_minute,
        )
        for game, r in RULES.items()
    ]
