"""CORS for the game web clients."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pfg.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured game origins; expose the headers clients read back."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id", "X-Admin-Secret"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"],
    )
