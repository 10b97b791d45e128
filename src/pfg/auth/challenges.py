"""Sign-in challenge store backed by Redis.

Challenges live in Redis rather than process memory so any API instance can
verify a challenge issued by another one. A challenge is consumed with a
single GETDEL, so it can be used at most once.
"""

from __future__ import annotations

import json
import secrets
import time
from typing import TYPE_CHECKING

from pfg.config import get_settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

CHALLENGE_KEY_PREFIX = "auth:challenge"
# Keep the key a little past expiry so an expired challenge reads as
# "expired" rather than "not found".
_EXPIRY_GRACE_SECONDS = 60


class ChallengeNotFound(Exception):
    """No pending challenge for this address (never issued or already used)."""


class ChallengeExpired(Exception):
    """The challenge existed but its expiry has passed."""


def _key(address: str) -> str:
    return f"{CHALLENGE_KEY_PREFIX}:{address}"


def make_nonce() -> str:
    return secrets.token_hex(16)


def make_message(address: str, nonce: str) -> str:
    return (
        "Planet Fatness Gym Login\n\n"
        f"Wallet: {address}\n"
        f"Nonce: {nonce}\n\n"
        "Sign this message to prove you own the wallet.\n"
        "No gas. No transaction."
    )


async def store_challenge(
    redis: Redis,
    address: str,
    nonce: str,
    message: str,
    ttl_seconds: int | None = None,
) -> float:
    """Store (or replace) the pending challenge for an address. Returns its expiry (unix time)."""
    if ttl_seconds is None:
        ttl_seconds = get_settings().auth_challenge_expire_seconds
    expires_at = time.time() + ttl_seconds
    await redis.set(
        _key(address),
        json.dumps({"nonce": nonce, "message": message, "expires_at": expires_at}),
        ex=ttl_seconds + _EXPIRY_GRACE_SECONDS,
    )
    return expires_at


async def consume_challenge(redis: Redis, address: str) -> str:
    """Take the pending challenge message for an address, exactly once.

    Raises:
        ChallengeNotFound: nothing pending.
        ChallengeExpired: pending but past its expiry.
    """
    raw = await redis.getdel(_key(address))
    if raw is None:
        raise ChallengeNotFound(address)
    data = json.loads(raw)
    if float(data["expires_at"]) < time.time():
        raise ChallengeExpired(address)
    return str(data["message"])
