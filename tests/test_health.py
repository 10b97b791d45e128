"""Health, readiness and version probes."""

import pytest
from httpx import AsyncClient

from pfg.redis_client import close_redis


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness(client: AsyncClient) -> None:
    """GET /ready checks the ledger table and Redis."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok", "redis": "ok"}


@pytest.mark.asyncio
async def test_readiness_degraded_without_redis(client: AsyncClient) -> None:
    """Redis only backs caching and rate limits, so losing it degrades but stays ready."""
    await close_redis()
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["redis"].startswith("error")


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"
