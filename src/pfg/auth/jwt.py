"""
HS256 JWT access tokens.

Tokens are issued by the wallet / Telegram sign-in flow and carry the user's
address (wallet public key or 'tg:<id>') in the `address` claim.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from pfg.config import get_settings


def create_access_token(address: str) -> str:
    """
    Create an access token for an address.

    Production tokens come from the sign-in service; this mints the same
    token shape for local development and the test suite.

    Args:
        address: Wallet public key or synthetic 'tg:<id>' identity.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": address,
        "address": address,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_access_token_expire_days),
        "iss": settings.jwt_issuer,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> str:
    """
    Verify a token and return the address it was issued for.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or has no address.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    address = str(payload.get("address") or payload.get("sub") or "").strip()
    if not address:
        msg = "Token carries no address"
        raise jwt.InvalidTokenError(msg)
    return address
