"""
Optional Redis connection.

Redis backs the per-IP rate limiter and the failed-login counters. Both are
skipped when ``AIRWALK_REDIS_URL`` is empty, so the API runs on the database
alone.
"""

import redis.asyncio as redis

_client: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    """Open the shared client for ``url`` (string responses)."""
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        decode_responses=True,
        max_connections=max_connections,
        health_check_interval=30,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
    _client = None


def get_redis() -> redis.Redis:
    """The shared client. Raises RuntimeError when Redis is not configured."""
    if _client is None:
        msg = "Redis is not configured"
        raise RuntimeError(msg)
    return _client


def get_optional_redis() -> redis.Redis | None:
    """FastAPI dependency: the shared client, or None without Redis."""
    return _client
