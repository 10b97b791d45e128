"""Reward calculator: raw session telemetry -> provisional calories.

Pure and deterministic. The result is provisional: the cap enforcer still
clamps it to the user's remaining daily headroom.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pfg.activity.games import DISTANCE_GAME, Game
from pfg.activity.rules import GameRules, rules_for

REASON_OK = "ok"
REASON_TOO_SHORT = "too_short"
REASON_SCORE_TOO_HIGH = "score_too_high"

MS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class RewardQuote:
    amount: int
    reason: str

    @property
    def accepted(self) -> bool:
        return self.reason == REASON_OK


def sanitize_number(value: object) -> float:
    """Clamp negative, non-finite and non-numeric input to 0."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _score_rate(score: float, minutes: float) -> float:
    return score / minutes if minutes > 0 else score


def _base_amount(game: Game, rules: GameRules, score: float, distance: float, minutes: float) -> float:
    if game is DISTANCE_GAME:
        if distance > 0:
            return distance * rules.reward_per_unit
        # No distance reported (idle or broken sensor): small time-based payout.
        return minutes * rules.idle_reward_per_minute
    return score * rules.reward_per_unit


def compute_reward(
    game: Game,
    raw_score: object,
    raw_distance: object,
    raw_duration_ms: object,
) -> RewardQuote:
    """Compute the provisional reward for one session.

    1. Normalize inputs (negatives / NaN / inf -> 0, duration floored to ms).
    2. Reject as too_short below the game's minimum duration.
    3. Reject as score_too_high when the score rate (or raw score) exceeds
       the game's ceiling. The distance game is exempt.
    4. Base = game-specific linear formula.
    5. Clamp to min(minutes * per_minute_cap, per_run_cap).
    """
    rules = rules_for(game)

    score = sanitize_number(raw_score)
    distance = sanitize_number(raw_distance)
    duration_ms = math.floor(sanitize_number(raw_duration_ms))

    if duration_ms < rules.min_duration_ms:
        return RewardQuote(amount=0, reason=REASON_TOO_SHORT)

    minutes = duration_ms / MS_PER_MINUTE

    if game is not DISTANCE_GAME:
        if rules.max_score > 0 and score > rules.max_score:
            return RewardQuote(amount=0, reason=REASON_SCORE_TOO_HIGH)
        if rules.max_score_per_minute > 0 and _score_rate(score, minutes) > rules.max_score_per_minute:
            return RewardQuote(amount=0, reason=REASON_SCORE_TOO_HIGH)

    base = _base_amount(game, rules, score, distance, minutes)
    ceiling = min(minutes * rules.per_minute_cap, rules.per_run_cap)
    amount = max(0, math.floor(min(base, ceiling)))

    return RewardQuote(amount=amount, reason=REASON_OK)
