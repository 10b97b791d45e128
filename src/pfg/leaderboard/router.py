"""Leaderboard API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.activity.games import coerce_game
from pfg.database import get_session
from pfg.leaderboard.schemas import LeaderboardEntryResponse, LeaderboardResponse
from pfg.leaderboard.service import query_leaderboard
from pfg.redis_client import get_redis_or_none

router = APIRouter(prefix="/api/v1", tags=["Leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    window: str = Query("lifetime", description="lifetime | day | week | month (daily/weekly/monthly accepted)"),
    metric: str = Query("reward", description="reward | score | distance | duration | streak"),
    game: str | None = Query(None),
    limit: int | None = Query(None, description="Clamped to 1..200"),
    db: AsyncSession = Depends(get_session),
):
    """Ranked users for a window and metric, optionally for one game."""
    try:
        data = await query_leaderboard(
            db,
            window=window,
            metric=metric,
            game=coerce_game(game) if game else None,
            limit=limit,
            redis=get_redis_or_none(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return LeaderboardResponse(
        window=data["window"],
        metric=data["metric"],
        game=data["game"],
        aggregation=data["aggregation"],
        source=data["source"],
        since=data["since"],
        entries=[LeaderboardEntryResponse(**e) for e in data["entries"]],
    )
