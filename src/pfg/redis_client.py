"""Redis connection pool.

Redis holds only disposable state here (rate-limit counters, sign-in
challenges, cached leaderboards); the ledger never depends on it.
"""

import redis.asyncio as redis

_pool: redis.Redis | None = None


async def init_redis(url: str, socket_timeout: float = 2.0) -> None:
    """Create the client. A short socket timeout keeps a slow Redis from stalling requests."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
    _pool = None


def get_redis() -> redis.Redis:
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


def get_redis_or_none() -> redis.Redis | None:
    """The client, or None before init_redis(); for callers where Redis is optional."""
    return _pool
