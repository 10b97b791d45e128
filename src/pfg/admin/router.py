"""Administrative reset. Gated by a shared secret; disabled when none is configured."""

from __future__ import annotations

import secrets

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.config import get_settings
from pfg.database import get_session
from pfg.db.models import DailyRewardCounter, GameSession, User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


def _check_secret(provided: str | None) -> None:
    expected = get_settings().admin_reset_secret
    if not expected or not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=403, detail="Forbidden")


@router.post("/reset")
async def reset(
    x_admin_secret: str | None = Header(default=None),
    db: AsyncSession = Depends(get_session),
) -> dict[str, object]:
    """Zero every lifetime rollup and clear the session ledger, in one transaction."""
    _check_secret(x_admin_secret)

    sessions = await db.execute(delete(GameSession))
    await db.execute(delete(DailyRewardCounter))
    users = await db.execute(
        update(User).values(reward_total=0, distance_total=0, best_duration=0, updated_at=func.now())
    )
    await db.commit()

    logger.warning("admin_reset", sessions_deleted=sessions.rowcount, users_reset=users.rowcount)
    return {"ok": True, "sessions_deleted": sessions.rowcount, "users_reset": users.rowcount}
