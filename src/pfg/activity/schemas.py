"""Pydantic schemas for activity ingestion endpoints."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pfg.schemas import CamelModel


# --- Submit ---


class SubmitSessionRequest(CamelModel):
    game: str | None = None
    score: float = 0.0
    distance: float = 0.0
    best_duration_seconds: float = 0.0
    duration_ms: float = Field(gt=0)
    streak: float = 0.0
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=64)


class TodayAggregateResponse(CamelModel):
    game: str
    earned_today: int
    sessions_today: int


class LifetimeTotalsResponse(CamelModel):
    reward_total: int
    distance_total: float
    best_duration: float


class SubmitSessionResponse(CamelModel):
    earned_amount: int
    reason: str  # ok, too_short, score_too_high
    daily_cap: int
    remaining_after: int
    today_aggregate: TodayAggregateResponse
    lifetime_totals: LifetimeTotalsResponse
    session_id: int | None = None
    duplicate: bool = False


# --- Legacy add ---


class LegacyAddRequest(CamelModel):
    add_reward: float = Field(
        default=0.0,
        validation_alias=AliasChoices("addReward", "add_reward", "caloriesDelta"),
    )
    add_distance: float = Field(
        default=0.0,
        validation_alias=AliasChoices("addDistance", "add_distance", "milesDelta"),
    )
    best_duration_seconds: float = Field(
        default=0.0,
        validation_alias=AliasChoices("bestDurationSeconds", "best_duration_seconds", "bestSeconds"),
    )
    game: str | None = None
    score: float = 0.0
    distance: float = 0.0
    duration_ms: float = 0.0
    streak: float = 0.0


class LegacyAddResponse(CamelModel):
    ok: bool = True
    address: str
    reward_total: int
    distance_total: float
    best_duration: float
    session_logged: bool


# --- Me / rules ---


class GameTodayResponse(CamelModel):
    game: str
    earned_today: int
    daily_cap: int
    remaining: int


class ActivityMeResponse(CamelModel):
    address: str
    lifetime_totals: LifetimeTotalsResponse
    today: list[GameTodayResponse]
    reset_at: str


class GameRulesResponse(CamelModel):
    game: str
    min_duration_ms: int
    per_run_cap: int
    daily_cap: int
    per_minute_cap: float
    max_score: float
    max_score_per_minute: float
