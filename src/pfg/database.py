"""Async SQLAlchemy engine and session management.

Sessions run at READ COMMITTED. The cap enforcer depends on it: after
waiting on a counter row lock, its next statement must see the receipt the
lock holder committed.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db(url: str, pool_size: int = 20, max_overflow: int = 10) -> None:
    """Create the engine and session factory.

    The connection time zone is pinned to UTC so TIMESTAMPTZ values come
    back in UTC whatever the server default is.
    """
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        connect_args={
            "statement_cache_size": 0,
            "server_settings": {"timezone": "UTC", "application_name": "pfg-api"},
        },
    )
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)


async def close_db() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory, for callers that need several independent transactions."""
    if _session_factory is None:
        msg = "Database not initialized. Call init_db() first."
        raise RuntimeError(msg)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request (FastAPI dependency); uncommitted work is rolled back on close."""
    async with get_session_factory()() as session:
        yield session
