"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.auth.jwt import verify_token
from airwalk.auth.service import get_user_by_id
from airwalk.database import get_session
from airwalk.db.models import User
from airwalk.errors import AuthError

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),  # noqa: B008
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> User:
    """
    Resolve the session token from ``Authorization: Bearer`` to its user.

    Raises:
        AuthError: Missing, invalid or expired token, or the user no longer exists.
    """
    if credentials is None:
        msg = "Missing bearer token"
        raise AuthError(msg)
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise AuthError(str(exc)) from exc

    user = await get_user_by_id(db, int(payload["sub"]))
    if user is None:
        msg = "User not found"
        raise AuthError(msg)
    return user
