"""User profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from pfg.auth.dependencies import get_current_address
from pfg.database import get_session
from pfg.schemas import CamelModel
from pfg.users.service import DisplayNameTaken, set_display_name

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


class DisplayNameRequest(CamelModel):
    display_name: str


class ProfileResponse(CamelModel):
    address: str
    display_name: str | None


@router.put("/me/display-name", response_model=ProfileResponse)
async def update_display_name(
    body: DisplayNameRequest,
    address: str = Depends(get_current_address),
    db: AsyncSession = Depends(get_session),
):
    """Claim a display name for the leaderboards."""
    try:
        user = await set_display_name(db, address, body.display_name)
    except DisplayNameTaken as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ProfileResponse(address=user.address, display_name=user.display_name)
