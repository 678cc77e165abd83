"""Account router: registration, login and password recovery."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.auth.jwt import create_access_token
from airwalk.auth.schemas import (
    LoginRequest,
    LoginResponse,
    RecoverRequest,
    RegisterRequest,
    RegisterResponse,
)
from airwalk.auth.service import authenticate_user, recover_password, register_from_application, register_user
from airwalk.config import get_settings
from airwalk.database import get_session
from airwalk.errors import ValidationError
from airwalk.redis_client import get_optional_redis
from airwalk.schemas import SuccessResponse

logger = structlog.get_logger()

router = APIRouter(tags=["Accounts"])

_RECOVERY_MESSAGE = "If the email is registered, a temporary password has been sent"


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> RegisterResponse:
    """Create an account from a pending application, or directly from credentials."""
    if body.username is None and body.password is None:
        user = await register_from_application(db, body.email)
    elif body.username is None or body.password is None:
        msg = "Username and password must be given together"
        raise ValidationError(msg)
    else:
        user = await register_user(db, body.username, body.email, body.password, body.town_hall_id)
    await db.commit()
    return RegisterResponse(message="User registered", user_id=user.id, username=user.username)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
    redis: Redis | None = Depends(get_optional_redis),  # noqa: B008
) -> LoginResponse:
    """Authenticate and issue a session token."""
    user = await authenticate_user(db, redis, body.username.strip(), body.password)
    await db.commit()
    logger.info("user_logged_in", user_id=user.id)
    return LoginResponse(
        message="Login successful",
        token=create_access_token(user.id, user.username),
        expires_in=get_settings().jwt_access_token_expire_minutes * 60,
        user_id=user.id,
        username=user.username,
    )


@router.post("/recover", response_model=SuccessResponse)
async def recover(
    body: RecoverRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> SuccessResponse:
    """Issue a temporary password. The answer never reveals whether the email exists."""
    await recover_password(db, body.email)
    await db.commit()
    return SuccessResponse(message=_RECOVERY_MESSAGE)
