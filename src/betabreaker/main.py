"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from betabreaker.climbing.router import router as climbing_router
from betabreaker.config import get_settings
from betabreaker.database import close_db, get_session_factory, init_db
from betabreaker.gamification.router import router as gamification_router
from betabreaker.gamification.seed import seed_badges
from betabreaker.health.router import router as health_router
from betabreaker.middleware import setup_middleware
from betabreaker.redis_client import close_redis, init_redis
from betabreaker.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await init_redis(settings.redis_url)

    # Seed badge definitions (idempotent)
    if settings.seed_badges_on_startup:
        try:
            async with get_session_factory()() as db:
                await seed_badges(db)
        except SQLAlchemyError:
            logger.warning("Badge seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="BetaBreaker API",
        description="Backend API for BetaBreaker — climbing log, gyms and badges",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(climbing_router)
    app.include_router(gamification_router)

    return app


app = create_app()
