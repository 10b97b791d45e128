"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pfg.auth.jwt import verify_token

_bearer = HTTPBearer(auto_error=False)


async def get_current_address(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> str:
    """Verify the bearer JWT and return the caller's address. Raises 401 on failure."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        return verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
