"""User profile business logic."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pfg.activity.rollup import ensure_user
from pfg.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DISPLAY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_ .\-]{3,32}$")


class DisplayNameTaken(ValueError):
    pass


def validate_display_name(display_name: str) -> str:
    """
    Trim and validate a display name.

    Raises:
        ValueError: If it is not 3-32 characters of letters, digits, space, '_', '.', '-'.
    """
    name = display_name.strip()
    if not DISPLAY_NAME_PATTERN.match(name):
        msg = "Display name must be 3-32 characters: letters, digits, space, _ . -"
        raise ValueError(msg)
    return name


async def set_display_name(db: AsyncSession, address: str, display_name: str) -> User:
    """
    Set a user's display name (unique, case-insensitive).

    Raises:
        ValueError: If the name is malformed.
        DisplayNameTaken: If another user already holds it.
    """
    name = validate_display_name(display_name)
    normalized = name.lower()

    await ensure_user(db, address)
    result = await db.execute(
        select(User)
        .where(User.display_name_normalized == normalized)
        .where(User.address != address)
    )
    if result.scalar_one_or_none() is not None:
        msg = "Display name already taken"
        raise DisplayNameTaken(msg)

    user = (await db.execute(select(User).where(User.address == address))).scalar_one()
    user.display_name = name
    user.display_name_normalized = normalized
    user.updated_at = datetime.now(timezone.utc)
    try:
        await db.commit()
    except IntegrityError as e:
        # Lost a race with another user claiming the same name.
        await db.rollback()
        msg = "Display name already taken"
        raise DisplayNameTaken(msg) from e

    logger.info("display_name_set", address=address, display_name=name)
    return user
