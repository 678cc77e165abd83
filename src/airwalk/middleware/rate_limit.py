"""Redis-backed fixed window rate limiting middleware."""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from airwalk.redis_client import get_redis

_EXEMPT_PATHS = frozenset({"/health", "/ready", "/version"})

# Credential endpoints share a much smaller budget
_CREDENTIAL_PATHS = frozenset({"/login", "/recover", "/register", "/apply"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limit requests per client IP using Redis counters.

    Credential endpoints (login, recovery, registration) are counted in their
    own bucket with ``auth_requests_per_window``.
    """

    def __init__(
        self,
        app: Any,  # noqa: ANN401
        requests_per_window: int = 100,
        window_seconds: int = 60,
        auth_requests_per_window: int = 10,
    ) -> None:
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds
        self.auth_requests_per_window = auth_requests_per_window

    def _bucket(self, request: Request) -> tuple[str, int]:
        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time()) // self.window_seconds
        if request.url.path in _CREDENTIAL_PATHS:
            return f"ratelimit:auth:{client_ip}:{window}", self.auth_requests_per_window
        return f"ratelimit:{client_ip}:{window}", self.requests_per_window

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Count the request, answer 429 once the bucket is exhausted."""
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            # Redis not configured: no rate limiting
            return await call_next(request)

        key, limit = self._bucket(request)
        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.window_seconds + 1)
        current_count: int = (await pipe.execute())[0]

        if current_count > limit:
            return JSONResponse(
                status_code=429,
                content={"success": False, "message": "Too many requests. Try again later."},
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
