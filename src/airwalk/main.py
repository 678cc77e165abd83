"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from airwalk.air_quality.router import router as air_quality_router
from airwalk.applications.router import router as applications_router
from airwalk.auth.router import router as auth_router
from airwalk.config import get_settings
from airwalk.database import close_db, get_session, init_db
from airwalk.db.seed import seed_roles
from airwalk.health.router import router as health_router
from airwalk.measurements.router import router as measurements_router
from airwalk.middleware import setup_middleware
from airwalk.nodes.router import router as nodes_router
from airwalk.prizes.router import router as prizes_router
from airwalk.redis_client import close_redis, init_redis
from airwalk.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.redis_url:
        await init_redis(settings.redis_url)

    # Reference roles (idempotent)
    try:
        async for db in get_session():
            await seed_roles(db)
            break
    except Exception:
        logger.warning("role_seeding_failed", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Air-o-Walk API",
        description="Backend API for Air-o-Walk: air-quality sensor nodes, gamified walks and prizes",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(applications_router)
    app.include_router(nodes_router)
    app.include_router(air_quality_router)
    app.include_router(measurements_router)
    app.include_router(prizes_router)

    return app


app = create_app()
