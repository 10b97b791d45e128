"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pfg.activity.router import router as activity_router
from pfg.admin.router import router as admin_router
from pfg.auth.router import router as auth_router
from pfg.config import get_settings
from pfg.database import close_db, init_db
from pfg.health.router import router as health_router
from pfg.leaderboard.router import router as leaderboard_router
from pfg.middleware import setup_middleware
from pfg.redis_client import close_redis, init_redis
from pfg.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle. Schema is owned by Alembic, not created here."""
    settings = get_settings()
    await init_db(settings.database_url, settings.database_pool_size, settings.database_max_overflow)
    await init_redis(settings.redis_url, settings.redis_socket_timeout)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Planet Fatness Gym API",
        description="Activity ingestion, calorie rewards and leaderboards for the Planet Fatness minigames",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(activity_router)
    app.include_router(leaderboard_router)
    app.include_router(users_router)
    app.include_router(admin_router)

    return app


app = create_app()
