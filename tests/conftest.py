"""Shared test fixtures.

Integration fixtures need PostgreSQL and Redis at PFG_DATABASE_URL /
PFG_REDIS_URL; they skip the test when either is unreachable.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

os.environ.setdefault("PFG_LEADERBOARD_CACHE_TTL_SECONDS", "0")
os.environ.setdefault("PFG_ADMIN_RESET_SECRET", "test-admin-secret")
os.environ.setdefault("PFG_LOG_FORMAT", "console")

from pfg.config import get_settings  # noqa: E402
from pfg.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from pfg.db import models  # noqa: E402, F401
from pfg.db.base import Base  # noqa: E402
from pfg.redis_client import close_redis, get_redis, init_redis  # noqa: E402

get_settings.cache_clear()

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
OTHER_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
TG_USER = "tg:424242"


async def _prepare_database() -> None:
    """Create tables and wipe rows, or skip when PostgreSQL is unreachable."""
    settings = get_settings()
    await init_db(settings.database_url, settings.database_pool_size, settings.database_max_overflow)
    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("TRUNCATE TABLE game_sessions, daily_reward_counters, users CASCADE"))
    except (OSError, SQLAlchemyError) as exc:
        await close_db()
        pytest.skip(f"PostgreSQL not available: {exc}")


async def _prepare_redis() -> None:
    settings = get_settings()
    await init_redis(settings.redis_url, settings.redis_socket_timeout)
    redis = get_redis()
    try:
        await redis.ping()
    except (OSError, RedisError) as exc:
        await close_redis()
        pytest.skip(f"Redis not available: {exc}")
    for pattern in ["ratelimit:*", "auth:challenge:*", "leaderboard:*"]:
        keys = await redis.keys(pattern)
        if keys:
            await redis.delete(*keys)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """A session on a freshly truncated database."""
    await _prepare_database()
    async with get_session_factory()() as session:
        yield session
    await close_db()


@pytest_asyncio.fixture
async def session_factory(db_session: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Factory for independent sessions (one per simulated concurrent request)."""
    return get_session_factory()


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[object, None]:
    """A Redis client with test keys cleared."""
    await _prepare_redis()
    yield get_redis()
    await close_redis()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client against a clean database and Redis."""
    from pfg.main import create_app

    await _prepare_database()
    await _prepare_redis()

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()
    await close_redis()


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient) -> AsyncClient:
    """Client authenticated as WALLET."""
    from pfg.auth.jwt import create_access_token

    client.headers["Authorization"] = f"Bearer {create_access_token(WALLET)}"
    return client
