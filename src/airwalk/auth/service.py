"""
Account business logic.

Handles user creation (from an application or directly), login with account
lockout, and password recovery.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, func, select

from airwalk.auth.credentials import derive_username, initial_password_from_dni
from airwalk.auth.password import (
    check_needs_rehash,
    generate_temporary_password,
    hash_password,
    validate_password_strength,
    verify_password,
)
from airwalk.config import get_settings
from airwalk.db.models import Application, Role, TownHall, User
from airwalk.email.service import get_email_service
from airwalk.errors import AuthError, ConflictError, InternalError, LockedError, NotFoundError
from airwalk.timeutils import utcnow

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_INVALID_CREDENTIALS = "Invalid username or password"


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by exact username."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def require_user(db: AsyncSession, user_id: int) -> User:
    """Fetch a user or raise NotFoundError."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return user


async def _get_role(db: AsyncSession, name: str) -> Role:
    result = await db.execute(select(Role).where(Role.name == name))
    role = result.scalar_one_or_none()
    if role is None:
        msg = f"Role '{name}' is not configured"
        raise InternalError(msg)
    return role


async def _available_username(db: AsyncSession, base: str) -> str:
    """Return ``base`` or the first free ``base2``, ``base3``, ..."""
    result = await db.execute(select(User.username).where(User.username.like(f"{base}%")))
    taken = set(result.scalars().all())
    if base not in taken:
        return base
    suffix = 2
    while f"{base}{suffix}" in taken:
        suffix += 1
    return f"{base}{suffix}"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_from_application(db: AsyncSession, email: str) -> User:
    """
    Turn the most recent application for ``email`` into a user account.

    The username is derived from the applicant's names, the initial password
    is the DNI without its check letter. The credentials are emailed to the
    applicant and the application is deleted.

    Raises:
        NotFoundError: No application exists for the email.
        ConflictError: The email already belongs to a user.
    """
    result = await db.execute(
        select(Application)
        .where(func.lower(Application.email) == email.lower().strip())
        .order_by(Application.id.desc())
        .limit(1)
    )
    application = result.scalar_one_or_none()
    if application is None:
        msg = "No application found for that email"
        raise NotFoundError(msg)

    if await get_user_by_email(db, application.email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)

    role = await _get_role(db, get_settings().default_role)
    username = await _available_username(db, derive_username(application.first_name, application.last_name))
    raw_password = initial_password_from_dni(application.dni)

    user = User(
        username=username,
        email=application.email.lower().strip(),
        password_hash=hash_password(raw_password),
        role_id=role.id,
        town_hall_id=application.town_hall_id,
        points=0,
        active_hours=0.0,
        total_distance=0.0,
        created_at=utcnow(),
        login_count=0,
    )
    db.add(user)
    await db.execute(delete(Application).where(Application.id == application.id))
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username, method="application")

    await _send_credentials(user, application.first_name, raw_password)
    return user


async def register_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    town_hall_id: int | None = None,
) -> User:
    """
    Register a user directly with chosen credentials.

    Raises:
        ValidationError: Password too weak.
        ConflictError: Username or email already taken.
        NotFoundError: Unknown town hall.
    """
    validate_password_strength(password)

    if await get_user_by_username(db, username) is not None:
        msg = "Username already taken"
        raise ConflictError(msg)
    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)
    if town_hall_id is not None and await db.get(TownHall, town_hall_id) is None:
        msg = "Town hall not found"
        raise NotFoundError(msg)

    role = await _get_role(db, get_settings().default_role)
    user = User(
        username=username,
        email=email.lower().strip(),
        password_hash=hash_password(password),
        role_id=role.id,
        town_hall_id=town_hall_id,
        points=0,
        active_hours=0.0,
        total_distance=0.0,
        created_at=utcnow(),
        login_count=0,
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username, method="direct")
    return user


async def _send_credentials(user: User, first_name: str, raw_password: str) -> None:
    """Email the initial credentials; a delivery failure never undoes the registration."""
    try:
        await get_email_service().send_template(
            to=user.email,
            template_name="welcome",
            context={"first_name": first_name, "username": user.username, "password": raw_password},
        )
    except Exception:
        logger.exception("welcome_email_failed", user_id=user.id)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(
    db: AsyncSession,
    redis: Redis | None,
    login: str,
    password: str,
) -> User:
    """
    Authenticate with username (or email) + password.

    Raises:
        AuthError: Unknown user or wrong password (same message for both).
        LockedError: Too many recent failed attempts.
    """
    if "@" in login:
        user = await get_user_by_email(db, login)
    else:
        user = await get_user_by_username(db, login)
    if user is None:
        raise AuthError(_INVALID_CREDENTIALS)

    if redis is not None and await check_account_lockout(redis, user.id):
        msg = "Account temporarily locked. Try again later."
        raise LockedError(msg)

    if not verify_password(password, user.password_hash):
        if redis is not None:
            await increment_failed_login(redis, user.id)
        logger.info("login_failed", user_id=user.id)
        raise AuthError(_INVALID_CREDENTIALS)

    if redis is not None:
        await clear_failed_login(redis, user.id)

    user.last_login = utcnow()
    user.login_count = (user.login_count or 0) + 1
    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)
    await db.flush()
    return user


# ---------------------------------------------------------------------------
# Account lockout
# ---------------------------------------------------------------------------


async def check_account_lockout(redis: Redis, user_id: int) -> bool:
    """Check if the account is locked due to too many failed login attempts."""
    settings = get_settings()
    count_str = await redis.get(f"login_attempts:{user_id}")
    if count_str is None:
        return False
    return int(count_str) >= settings.account_lockout_threshold


async def increment_failed_login(redis: Redis, user_id: int) -> int:
    """Increment failed login counter. Returns the new count."""
    settings = get_settings()
    key = f"login_attempts:{user_id}"
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, settings.account_lockout_duration_minutes * 60)
    return int(count)


async def clear_failed_login(redis: Redis, user_id: int) -> None:
    """Clear the failed login counter after a successful login."""
    await redis.delete(f"login_attempts:{user_id}")


# ---------------------------------------------------------------------------
# Password recovery
# ---------------------------------------------------------------------------


async def recover_password(db: AsyncSession, email: str) -> None:
    """
    Replace the password of the account behind ``email`` with a temporary one and email it.

    Does nothing (and says nothing) when no account uses the email, so callers
    can answer identically in both cases.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        logger.info("password_recovery_unknown_email")
        return

    temp_password = generate_temporary_password()
    user.password_hash = hash_password(temp_password)
    await db.flush()
    logger.info("password_recovery_issued", user_id=user.id)

    try:
        await get_email_service().send_template(
            to=user.email,
            template_name="temporary_password",
            context={"username": user.username, "password": temp_password},
        )
    except Exception:
        logger.exception("recovery_email_failed", user_id=user.id)
