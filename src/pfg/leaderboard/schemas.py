"""Pydantic response models for leaderboard endpoints."""

from __future__ import annotations

from pfg.schemas import CamelModel


class LeaderboardEntryResponse(CamelModel):
    rank: int
    address: str
    display_name: str
    value: int | float
    score: float | None = None
    sessions: int | None = None
    best_duration: float | None = None


class LeaderboardResponse(CamelModel):
    window: str
    metric: str
    game: str | None
    aggregation: str
    source: str
    since: str | None
    entries: list[LeaderboardEntryResponse]
