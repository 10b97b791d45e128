"""Leaderboard query engine.

Read-only. lifetime reward/distance boards (no game filter) are served from
the users rollup; every other combination aggregates the session ledger
grouped by address, using the aggregation declared in the policy table.

Ties keep insertion order (first receipt id, or user creation time); no
other tie breaking is applied.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import structlog
from redis.asyncio import Redis
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.games import Game
from pfg.activity.windows import day_start, month_start, utc_now, week_start
from pfg.config import get_settings
from pfg.db.models import GameSession, User
from pfg.leaderboard.policy import (
    Aggregation,
    Metric,
    Window,
    aggregation_for,
    normalize_metric,
    normalize_window,
    uses_rollup,
)

logger = structlog.get_logger()

LEADERBOARD_CACHE_PREFIX = "leaderboard"

_LEDGER_COLUMNS = {
    Metric.REWARD: GameSession.reward_amount,
    Metric.SCORE: GameSession.score,
    Metric.DISTANCE: GameSession.distance,
    Metric.DURATION: GameSession.duration_ms,
    Metric.STREAK: GameSession.streak,
}

_ROLLUP_COLUMNS = {
    Metric.REWARD: User.reward_total,
    Metric.DISTANCE: User.distance_total,
}

_AGG_FUNCS = {
    Aggregation.SUM: func.sum,
    Aggregation.MAX: func.max,
}


def window_start(window: Window, now: datetime | None = None) -> datetime | None:
    """Lower bound of a window; None for lifetime."""
    if window is Window.DAY:
        return day_start(now)
    if window is Window.WEEK:
        return week_start(now)
    if window is Window.MONTH:
        return month_start(now)
    return None


def clamp_limit(limit: int | None) -> int:
    settings = get_settings()
    if limit is None:
        limit = settings.leaderboard_default_limit
    return max(1, min(int(limit), settings.leaderboard_max_limit))


def build_cache_key(window: Window, metric: Metric, game: Game | None, limit: int, since: datetime | None) -> str:
    bucket = since.date().isoformat() if since is not None else "all"
    game_part = game.value if game is not None else "all"
    return f"{LEADERBOARD_CACHE_PREFIX}:{window.value}:{bucket}:{metric.value}:{game_part}:{limit}"


def _display_name(address: str, display_name: str | None) -> str:
    if display_name:
        return display_name
    if len(address) <= 10:
        return address
    return f"{address[:4]}…{address[-4:]}"


def _metric_value(metric: Metric, raw: Any) -> int | float:
    """Reward is an integer amount; distance and duration stay fractional."""
    if metric is Metric.REWARD:
        return int(raw or 0)
    value = float(raw or 0)
    if metric is Metric.DURATION:
        value = value / 1000.0  # ms -> seconds
    return value


async def _query_rollup(db: AsyncSession, metric: Metric, limit: int) -> list[dict[str, Any]]:
    column = _ROLLUP_COLUMNS[metric]
    result = await db.execute(
        select(User.address, User.display_name, column.label("value"), User.best_duration)
        .order_by(column.desc(), User.created_at.asc())
        .limit(limit)
    )
    return [
        {
            "address": row.address,
            "display_name": _display_name(row.address, row.display_name),
            "value": _metric_value(metric, row.value),
            "score": None,
            "sessions": None,
            "best_duration": float(row.best_duration or 0),
        }
        for row in result.all()
    ]


async def _query_ledger(
    db: AsyncSession,
    metric: Metric,
    game: Game | None,
    since: datetime | None,
    limit: int,
) -> list[dict[str, Any]]:
    rule = aggregation_for(metric, game)
    value_expr = _AGG_FUNCS[rule.value](_LEDGER_COLUMNS[metric])
    score_expr = _AGG_FUNCS[rule.score](GameSession.score)
    first_id = func.min(GameSession.id)

    stmt = (
        select(
            GameSession.address,
            User.display_name,
            value_expr.label("value"),
            score_expr.label("score"),
            func.count(GameSession.id).label("sessions"),
            func.max(GameSession.best_duration).label("best_duration"),
        )
        .join(User, User.address == GameSession.address)
        .group_by(GameSession.address, User.display_name)
        .order_by(value_expr.desc(), first_id.asc())
        .limit(limit)
    )
    if game is not None:
        stmt = stmt.where(GameSession.game == game.value)
    if since is not None:
        stmt = stmt.where(GameSession.created_at >= since)

    result = await db.execute(stmt)
    entries = []
    for row in result.all():
        entries.append({
            "address": row.address,
            "display_name": _display_name(row.address, row.display_name),
            "value": _metric_value(metric, row.value),
            "score": float(row.score or 0),
            "sessions": int(row.sessions),
            "best_duration": float(row.best_duration or 0),
        })
    return entries


async def query_leaderboard(
    db: AsyncSession,
    window: str | Window = Window.LIFETIME,
    metric: str | Metric = Metric.REWARD,
    game: Game | None = None,
    limit: int | None = None,
    now: datetime | None = None,
    redis: Redis | None = None,
) -> dict[str, Any]:
    """Rank users for a window/metric/game combination.

    Raises:
        ValueError: Unknown window or metric.
    """
    window = normalize_window(window)
    metric = normalize_metric(metric)
    limit = clamp_limit(limit)
    if now is None:
        now = utc_now()
    since = window_start(window, now)

    cache_key = build_cache_key(window, metric, game, limit, since)
    ttl = get_settings().leaderboard_cache_ttl_seconds
    if redis is not None and ttl > 0:
        try:
            cached = await redis.get(cache_key)
            if cached:
                return json.loads(cached)
        except Exception:
            logger.warning("leaderboard_cache_error", key=cache_key, exc_info=True)

    if uses_rollup(window, metric, game):
        entries = await _query_rollup(db, metric, limit)
        source = "rollup"
    else:
        entries = await _query_ledger(db, metric, game, since, limit)
        source = "ledger"

    for idx, entry in enumerate(entries):
        entry["rank"] = idx + 1

    data = {
        "window": window.value,
        "metric": metric.value,
        "game": game.value if game is not None else None,
        "aggregation": aggregation_for(metric, game).value.value,
        "source": source,
        "since": since.isoformat() if since is not None else None,
        "entries": entries,
    }

    if redis is not None and ttl > 0:
        try:
            await redis.setex(cache_key, ttl, json.dumps(data))
        except Exception:
            logger.warning("leaderboard_cache_error", key=cache_key, exc_info=True)

    return data
