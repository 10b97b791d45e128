"""Sign-in challenge store (Redis) and its HTTP endpoint."""

from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from pfg.auth.challenges import (
    ChallengeExpired,
    ChallengeNotFound,
    consume_challenge,
    make_message,
    make_nonce,
    store_challenge,
)
from pfg.redis_client import get_redis
from tests.conftest import WALLET

pytestmark = [pytest.mark.asyncio, pytest.mark.integration]


class TestChallengeStore:
    async def test_consume_once(self, redis_client):
        nonce = make_nonce()
        message = make_message(WALLET, nonce)
        await store_challenge(redis_client, WALLET, nonce, message)

        assert await consume_challenge(redis_client, WALLET) == message
        with pytest.raises(ChallengeNotFound):
            await consume_challenge(redis_client, WALLET)

    async def test_never_issued(self, redis_client):
        with pytest.raises(ChallengeNotFound):
            await consume_challenge(redis_client, "never-asked")

    async def test_expired_challenge(self, redis_client):
        await store_challenge(redis_client, WALLET, "n", "m", ttl_seconds=-1)
        with pytest.raises(ChallengeExpired):
            await consume_challenge(redis_client, WALLET)

    async def test_new_challenge_replaces_old(self, redis_client):
        await store_challenge(redis_client, WALLET, "n1", "first")
        await store_challenge(redis_client, WALLET, "n2", "second")
        assert await consume_challenge(redis_client, WALLET) == "second"

    async def test_key_has_ttl(self, redis_client):
        await store_challenge(redis_client, WALLET, "n", "m", ttl_seconds=30)
        ttl = await redis_client.ttl(f"auth:challenge:{WALLET}")
        assert 30 < ttl <= 90


class TestChallengeEndpoint:
    async def test_issue_challenge(self, client: AsyncClient):
        resp = await client.post("/api/v1/auth/challenge", json={"address": f" {WALLET} "})
        assert resp.status_code == 200
        data = resp.json()
        assert data["address"] == WALLET
        assert data["nonce"] in data["message"]
        assert data["expiresAt"] > 0

        stored = json.loads(await get_redis().get(f"auth:challenge:{WALLET}"))
        assert stored["nonce"] == data["nonce"]

    async def test_address_required(self, client: AsyncClient):
        resp = await client.post("/api/v1/auth/challenge", json={})
        assert resp.status_code == 422
