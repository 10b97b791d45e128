"""Per-game fairness parameters.

These values are the whole payout economy. Loaded at import, never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

from pfg.activity.games import Game


@dataclass(frozen=True)
class GameRules:
    min_duration_ms: int
    per_run_cap: int
    daily_cap: int
    per_minute_cap: float
    reward_per_unit: float
    idle_reward_per_minute: float = 0.0
    max_score: float = 0.0  # 0 = unbounded, governed by max_score_per_minute
    max_score_per_minute: float = 0.0  # 0 = not checked


RULES: dict[Game, GameRules] = {
    Game.RUNNER: GameRules(
        min_duration_ms=12_000,
        per_run_cap=260,
        daily_cap=1600,
        per_minute_cap=220,
        reward_per_unit=110,  # per mile
        idle_reward_per_minute=20,
    ),
    Game.BOXING: GameRules(
        min_duration_ms=15_000,
        per_run_cap=200,
        daily_cap=1200,
        per_minute_cap=150,
        reward_per_unit=0.5,  # per punch landed
        max_score_per_minute=400,
    ),
    Game.JUMP_ROPE: GameRules(
        min_duration_ms=10_000,
        per_run_cap=180,
        daily_cap=1000,
        per_minute_cap=160,
        reward_per_unit=1,  # per jump
        max_score_per_minute=250,
    ),
    Game.STACKER: GameRules(
        min_duration_ms=8_000,
        per_run_cap=150,
        daily_cap=900,
        per_minute_cap=120,
        reward_per_unit=2,  # per block stacked
        max_score=500,
        max_score_per_minute=120,
    ),
    Game.UNKNOWN: GameRules(
        min_duration_ms=30_000,
        per_run_cap=50,
        daily_cap=200,
        per_minute_cap=25,
        reward_per_unit=0.25,
        max_score_per_minute=60,
    ),
}

# Anything missing from RULES gets the tightest entry, never an unbounded one.
FALLBACK_RULES = RULES[Game.UNKNOWN]


def rules_for(game: Game) -> GameRules:
    """Return the rules for a game, failing closed to the tightest rules."""
    return RULES.get(game, FALLBACK_RULES)
