"""Closed enumeration of the gym minigames.

Every game string that enters the system goes through coerce_game().
Unrecognised names become Game.UNKNOWN instead of being rejected, so older
clients keep working; UNKNOWN carries the tightest rules, so coercion never
widens a payout.
"""

from __future__ import annotations

from enum import Enum


class Game(str, Enum):
    RUNNER = "runner"
    BOXING = "boxing"
    JUMP_ROPE = "jump_rope"
    STACKER = "stacker"
    UNKNOWN = "unknown"


DEFAULT_GAME = Game.UNKNOWN

# The distance game: rewarded per mile, exempt from the score-rate check.
DISTANCE_GAME = Game.RUNNER

# Names shipped by older clients.
_ALIASES: dict[str, Game] = {
    "run": Game.RUNNER,
    "running": Game.RUNNER,
    "treadmill": Game.RUNNER,
    "box": Game.BOXING,
    "punch": Game.BOXING,
    "jumprope": Game.JUMP_ROPE,
    "jump-rope": Game.JUMP_ROPE,
    "rope": Game.JUMP_ROPE,
    "stack": Game.STACKER,
    "tower": Game.STACKER,
}


def coerce_game(raw: object) -> Game:
    """Map any client-supplied game name onto the enum, defaulting to UNKNOWN."""
    if isinstance(raw, Game):
        return raw
    name = str(raw or "").strip().lower().replace(" ", "_")
    if not name:
        return DEFAULT_GAME
    try:
        return Game(name)
    except ValueError:
        return _ALIASES.get(name, DEFAULT_GAME)
