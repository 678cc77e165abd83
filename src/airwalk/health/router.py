"""API index plus liveness, readiness and version checks."""

from fastapi import APIRouter, Depends, Request
from fastapi.routing import APIRoute
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.config import get_settings
from airwalk.database import get_session
from airwalk.redis_client import get_optional_redis

router = APIRouter(tags=["Health"])

_PASSING = frozenset({"ok", "disabled"})


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


async def _check_redis() -> str:
    redis = get_optional_redis()
    if redis is None:
        return "disabled"
    try:
        await redis.ping()
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/")
async def index(request: Request) -> dict[str, object]:
    """Welcome message with the version and every public endpoint."""
    endpoints: dict[str, str] = {}
    for route in request.app.routes:
        if not isinstance(route, APIRoute) or route.path == "/":
            continue
        summary = (route.description or route.name.replace("_", " ")).splitlines()[0]
        for method in sorted(route.methods):
            endpoints[f"{method} {route.path}"] = summary
    return {"message": "Air-o-Walk API", "version": get_settings().app_version, "endpoints": endpoints}


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Database and (when configured) Redis connectivity. Redis reports ``disabled`` without a URL."""
    checks = {"database": await _check_database(db), "redis": await _check_redis()}
    ready = all(value in _PASSING for value in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"service": "airwalk-api", "version": settings.app_version, "environment": settings.environment}
