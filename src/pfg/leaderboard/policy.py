"""Leaderboard windows, metrics and the aggregation policy table.

How each metric aggregates is data, not branching in the query code:
AGGREGATION_POLICY maps (metric, game or None) to the aggregation used for
the ranked value and for the secondary score column. aggregation_for()
falls back from the game-specific entry to the game-agnostic one, so it is
total over Metric x (Game | None).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pfg.activity.games import Game


class Window(str, Enum):
    LIFETIME = "lifetime"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class Metric(str, Enum):
    REWARD = "reward"
    SCORE = "score"
    DISTANCE = "distance"
    DURATION = "duration"
    STREAK = "streak"


class Aggregation(str, Enum):
    SUM = "sum"
    MAX = "max"


@dataclass(frozen=True)
class AggregationRule:
    value: Aggregation
    score: Aggregation


_WINDOW_ALIASES: dict[str, Window] = {
    "daily": Window.DAY,
    "today": Window.DAY,
    "weekly": Window.WEEK,
    "monthly": Window.MONTH,
    "alltime": Window.LIFETIME,
    "all": Window.LIFETIME,
}

_SUMMED = AggregationRule(value=Aggregation.SUM, score=Aggregation.SUM)
_BEST = AggregationRule(value=Aggregation.MAX, score=Aggregation.MAX)
# Stacker scores are high scores; adding them up means nothing.
_SUMMED_HIGH_SCORE = AggregationRule(value=Aggregation.SUM, score=Aggregation.MAX)

AGGREGATION_POLICY: dict[tuple[Metric, Game | None], AggregationRule] = {
    (Metric.REWARD, None): _SUMMED,
    (Metric.DISTANCE, None): _SUMMED,
    (Metric.DURATION, None): _SUMMED,
    (Metric.SCORE, None): _BEST,
    (Metric.STREAK, None): _BEST,
    (Metric.REWARD, Game.STACKER): _SUMMED_HIGH_SCORE,
    (Metric.DISTANCE, Game.STACKER): _SUMMED_HIGH_SCORE,
    (Metric.DURATION, Game.STACKER): _SUMMED_HIGH_SCORE,
}

# Served straight from the users table when no game filter is given.
ROLLUP_METRICS = frozenset({Metric.REWARD, Metric.DISTANCE})


def normalize_window(raw: str | Window) -> Window:
    """Parse a window name, accepting daily/weekly/monthly style aliases."""
    if isinstance(raw, Window):
        return raw
    name = str(raw).strip().lower()
    try:
        return Window(name)
    except ValueError:
        if name in _WINDOW_ALIASES:
            return _WINDOW_ALIASES[name]
        raise ValueError(f"Unknown window: {raw}") from None


def normalize_metric(raw: str | Metric) -> Metric:
    if isinstance(raw, Metric):
        return raw
    try:
        return Metric(str(raw).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown metric: {raw}") from None


def aggregation_for(metric: Metric, game: Game | None = None) -> AggregationRule:
    """Look up the aggregation rule, preferring a game-specific override."""
    if game is not None and (metric, game) in AGGREGATION_POLICY:
        return AGGREGATION_POLICY[(metric, game)]
    return AGGREGATION_POLICY[(metric, None)]


def uses_rollup(window: Window, metric: Metric, game: Game | None) -> bool:
    return window is Window.LIFETIME and game is None and metric in ROLLUP_METRICS
