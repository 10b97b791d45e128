"""Redis-backed fixed-window rate limiting middleware.

Ingestion routes get their own, tighter budget so a looping client cannot
spam session submissions while staying under the general limit.
"""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from pfg.redis_client import get_redis

# Paths exempt from rate limiting
_EXEMPT_PATHS = frozenset({"/health", "/ready"})
_INGEST_PREFIX = "/api/v1/activity/"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limit requests per IP and route group using Redis counters."""

    def __init__(  # noqa: ANN401
        self,
        app: Any,
        requests_per_window: int = 100,
        ingest_requests_per_window: int = 30,
        window_seconds: int = 60,
    ) -> None:
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.ingest_requests_per_window = ingest_requests_per_window
        self.window_seconds = window_seconds

    def _bucket(self, request: Request) -> tuple[str, int]:
        if request.method == "POST" and request.url.path.startswith(_INGEST_PREFIX):
            return "ingest", self.ingest_requests_per_window
        return "api", self.requests_per_window

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Count the request in its window, return 429 once the group's budget is spent."""
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        group, limit = self._bucket(request)
        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time()) // self.window_seconds
        rate_key = f"ratelimit:{group}:{client_ip}:{window}"

        try:
            redis = get_redis()
        except RuntimeError:
            # Redis not initialized; serve without limiting.
            return await call_next(request)

        pipe = redis.pipeline()
        pipe.incr(rate_key)
        pipe.expire(rate_key, self.window_seconds + 1)
        results: list[Any] = await pipe.execute()
        current_count: int = results[0]

        if current_count > limit:
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Limit": str(limit),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - current_count))
        response.headers["X-RateLimit-Limit"] = str(limit)
        return response
