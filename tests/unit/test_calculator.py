"""Reward calculator unit tests (pure function, no I/O)."""

from __future__ import annotations

import math

import pytest

from pfg.activity.calculator import (
    REASON_OK,
    REASON_SCORE_TOO_HIGH,
    REASON_TOO_SHORT,
    compute_reward,
    sanitize_number,
)
from pfg.activity.games import Game
from pfg.activity.rules import RULES


class TestRunnerScenarios:
    """The distance game: 110 calories per mile, 220/min, 260 per run."""

    def test_too_short_session_earns_nothing(self):
        quote = compute_reward(Game.RUNNER, 0, 0, 10_000)
        assert quote.amount == 0
        assert quote.reason == REASON_TOO_SHORT

    def test_too_short_ignores_huge_distance(self):
        quote = compute_reward(Game.RUNNER, 0, 500.0, 11_999)
        assert quote.amount == 0
        assert quote.reason == REASON_TOO_SHORT

    def test_minimum_duration_is_inclusive(self):
        quote = compute_reward(Game.RUNNER, 0, 0.1, 12_000)
        assert quote.reason == REASON_OK

    def test_two_miles_in_one_minute(self):
        """base = 2.0 * 110 = 220, time cap = 1 * 220 = 220, per-run cap 260."""
        quote = compute_reward(Game.RUNNER, 0, 2.0, 60_000)
        assert quote.amount == 220
        assert quote.reason == REASON_OK

    def test_long_run_clamped_to_per_run_cap(self):
        quote = compute_reward(Game.RUNNER, 0, 20.0, 600_000)
        assert quote.amount == 260

    def test_short_burst_clamped_by_time_cap(self):
        """5 miles in 30s: base 550, time cap 0.5 * 220 = 110."""
        quote = compute_reward(Game.RUNNER, 0, 5.0, 30_000)
        assert quote.amount == 110

    def test_no_distance_falls_back_to_time(self):
        """Idle run still earns a small time-based amount: 3 min * 20."""
        quote = compute_reward(Game.RUNNER, 0, 0, 180_000)
        assert quote.amount == 60
        assert quote.reason == REASON_OK

    def test_runner_is_exempt_from_score_rate(self):
        quote = compute_reward(Game.RUNNER, 1_000_000, 1.0, 60_000)
        assert quote.reason == REASON_OK
        assert quote.amount == 110


class TestScoreGames:
    def test_jump_rope_pays_per_jump(self):
        quote = compute_reward(Game.JUMP_ROPE, 120, 0, 60_000)
        assert quote.amount == 120
        assert quote.reason == REASON_OK

    def test_score_rate_over_ceiling_rejected(self):
        """251 jumps in one minute is above the 250/min ceiling."""
        quote = compute_reward(Game.JUMP_ROPE, 251, 0, 60_000)
        assert quote.amount == 0
        assert quote.reason == REASON_SCORE_TOO_HIGH

    def test_score_rate_uses_fractional_minutes(self):
        """200 jumps in 30s is 400/min."""
        quote = compute_reward(Game.JUMP_ROPE, 200, 0, 30_000)
        assert quote.reason == REASON_SCORE_TOO_HIGH

    def test_stacker_absolute_score_ceiling(self):
        """Stacker caps raw score at 500 regardless of duration."""
        quote = compute_reward(Game.STACKER, 501, 0, 60 * 60_000)
        assert quote.reason == REASON_SCORE_TOO_HIGH

    def test_boxing_half_calorie_per_punch(self):
        quote = compute_reward(Game.BOXING, 301, 0, 60_000)
        assert quote.amount == 150  # floor(150.5) then time cap 150

    def test_amount_is_floored(self):
        quote = compute_reward(Game.BOXING, 99, 0, 60_000)
        assert quote.amount == 49

    def test_unknown_game_uses_tightest_rules(self):
        quote = compute_reward(Game.UNKNOWN, 10_000, 0, 20_000)
        assert quote.reason == REASON_TOO_SHORT
        quote = compute_reward(Game.UNKNOWN, 400, 0, 10 * 60_000)
        assert quote.amount == 50


class TestCaps:
    @pytest.mark.parametrize("game", list(Game))
    @pytest.mark.parametrize("duration_ms", [15_000, 61_000, 300_000, 3_600_000])
    def test_amount_never_exceeds_run_or_time_cap(self, game, duration_ms):
        rules = RULES[game]
        quote = compute_reward(game, 10**9, 10**6, duration_ms)
        minutes = duration_ms / 60_000
        assert quote.amount <= min(rules.per_run_cap, minutes * rules.per_minute_cap)


class TestNormalization:
    @pytest.mark.parametrize("value", [-5, float("nan"), float("inf"), float("-inf"), None, "abc"])
    def test_bad_numbers_become_zero(self, value):
        assert sanitize_number(value) == 0.0

    def test_numeric_strings_are_accepted(self):
        assert sanitize_number("2.5") == 2.5

    def test_negative_distance_treated_as_zero(self):
        """Negative distance -> idle fallback instead of a negative payout."""
        quote = compute_reward(Game.RUNNER, 0, -10, 60_000)
        assert quote.amount == 20

    def test_nan_duration_is_too_short(self):
        quote = compute_reward(Game.RUNNER, 0, 2.0, math.nan)
        assert quote.reason == REASON_TOO_SHORT

    def test_fractional_duration_is_floored(self):
        quote = compute_reward(Game.RUNNER, 0, 1.0, 11_999.9)
        assert quote.reason == REASON_TOO_SHORT
