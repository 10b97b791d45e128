"""Sign-in challenge endpoint.

Signature verification and token issuance belong to the sign-in service,
which reads the challenge back with consume_challenge().
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import Field

from pfg.auth.challenges import make_message, make_nonce, store_challenge
from pfg.redis_client import get_redis
from pfg.schemas import CamelModel

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


class ChallengeRequest(CamelModel):
    address: str = Field(min_length=3, max_length=128)


class ChallengeResponse(CamelModel):
    address: str
    nonce: str
    message: str
    expires_at: float


@router.post("/challenge", response_model=ChallengeResponse)
async def challenge(body: ChallengeRequest) -> ChallengeResponse:
    """Issue a one-time message for the wallet to sign."""
    address = body.address.strip()
    nonce = make_nonce()
    message = make_message(address, nonce)
    expires_at = await store_challenge(get_redis(), address, nonce, message)
    return ChallengeResponse(address=address, nonce=nonce, message=message, expires_at=expires_at)
