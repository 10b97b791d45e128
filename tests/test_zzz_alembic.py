"""Alembic migration tests.

File named test_zzz_alembic.py to sort LAST in pytest collection order.
The db_session fixture is only used to skip when PostgreSQL is unreachable.
"""

import subprocess
import sys

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


def _alembic(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        capture_output=True,
        text=True,
    )


async def test_alembic_upgrade_head(db_session: AsyncSession) -> None:
    """Upgrading over an existing schema is a no-op, not an error."""
    result = _alembic("upgrade", "head")
    assert result.returncode == 0, f"alembic upgrade failed: {result.stderr}"

    tables = (await db_session.execute(text(
        "SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'"
    ))).scalars().all()
    assert {"users", "game_sessions", "daily_reward_counters"} <= set(tables)


async def test_alembic_current_shows_head(db_session: AsyncSession) -> None:
    _alembic("upgrade", "head")
    result = _alembic("current")
    assert result.returncode == 0
    assert "001_baseline" in result.stdout
