"""HTTP middleware stack and global error handlers."""

from fastapi import FastAPI

from airwalk.config import Settings
from airwalk.middleware.cors import setup_cors
from airwalk.middleware.error_handler import setup_error_handlers
from airwalk.middleware.logging import setup_logging
from airwalk.middleware.rate_limit import RateLimitMiddleware
from airwalk.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Install logging, error envelopes and middleware on ``app``.

    Outermost first, a request passes CORS, then the request id, then the
    rate limiter (the last one added wraps the others).
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        auth_requests_per_window=settings.rate_limit_auth_requests,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
