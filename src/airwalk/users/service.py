"""User profile, activity and points business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update

from airwalk.auth.password import hash_password, validate_password_strength, verify_password
from airwalk.auth.service import require_user
from airwalk.db.models import DailyStats, User
from airwalk.errors import AuthError, ConflictError, ValidationError
from airwalk.timeutils import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


async def update_user(
    db: AsyncSession,
    user_id: int,
    username: str | None = None,
    email: str | None = None,
    current_password: str | None = None,
    new_password: str | None = None,
) -> User:
    """
    Change username, email and/or password.

    A password change requires the current password. Fields equal to the
    stored value are ignored.

    Raises:
        NotFoundError: Unknown user.
        ValidationError: Nothing to update, weak new password, or no effective change.
        ConflictError: Username or email already used by another account.
        AuthError: Current password missing or wrong.
    """
    user = await require_user(db, user_id)
    if not username and not email and not new_password:
        msg = "At least one field must be provided"
        raise ValidationError(msg)

    changed = False

    if username and username != user.username:
        taken = await db.execute(select(User.id).where(User.username == username, User.id != user_id))
        if taken.first() is not None:
            msg = "Username already taken"
            raise ConflictError(msg)
        user.username = username
        changed = True

    if email:
        email = email.lower().strip()
    if email and email != user.email:
        taken = await db.execute(select(User.id).where(func.lower(User.email) == email, User.id != user_id))
        if taken.first() is not None:
            msg = "Email already registered"
            raise ConflictError(msg)
        user.email = email
        changed = True

    if new_password:
        if not current_password:
            msg = "Current password is required to set a new one"
            raise AuthError(msg)
        if not verify_password(current_password, user.password_hash):
            msg = "Current password is incorrect"
            raise AuthError(msg)
        validate_password_strength(new_password)
        user.password_hash = hash_password(new_password)
        changed = True

    if not changed:
        msg = "No changes detected"
        raise ValidationError(msg)

    await db.flush()
    logger.info("user_updated", user_id=user_id)
    return user


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


async def update_activity(db: AsyncSession, user_id: int, time: float, distance: float) -> User:
    """Add a walk's time and distance to the user's running totals."""
    if time < 0 or distance < 0:
        msg = "Time and distance must not be negative"
        raise ValidationError(msg)
    user = await require_user(db, user_id)
    user.active_hours = (user.active_hours or 0.0) + time
    user.total_distance = (user.total_distance or 0.0) + distance
    await db.flush()
    return user


async def add_daily_stats(
    db: AsyncSession,
    user_id: int,
    active_hours: float,
    distance: float,
    points: int,
) -> DailyStats:
    """Append one session to the activity ledger."""
    await require_user(db, user_id)
    entry = DailyStats(
        user_id=user_id,
        timestamp=utcnow(),
        active_hours=active_hours,
        distance=distance,
        points=points,
    )
    db.add(entry)
    await db.flush()
    logger.info("daily_stats_added", user_id=user_id, points=points)
    return entry


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


async def get_points(db: AsyncSession, user_id: int) -> int:
    user = await require_user(db, user_id)
    return user.points


async def add_points(db: AsyncSession, user_id: int, points: int) -> int:
    """
    Award points. Returns the new total.

    Raises:
        ValidationError: ``points`` is not a positive integer.
        NotFoundError: Unknown user.
    """
    if points <= 0:
        msg = "Points must be a positive integer"
        raise ValidationError(msg)
    await require_user(db, user_id)
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(points=User.points + points)
        .returning(User.points)
    )
    total = result.scalar_one()
    logger.info("points_awarded", user_id=user_id, points=points, total=total)
    return total
