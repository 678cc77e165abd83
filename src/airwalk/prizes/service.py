"""
Prize catalogue and redemption.

Redemption debits points and decrements stock with conditional UPDATEs
(``points >= cost``, ``quantity_available > 0``) so concurrent redemptions can
never overdraw either; any failed condition rolls the whole redemption back.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select, update

from airwalk.auth.service import require_user
from airwalk.db.models import Prize, User, Winner
from airwalk.errors import InternalError, NotFoundError, ValidationError
from airwalk.timeutils import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

COUPON_ALPHABET = string.ascii_uppercase + string.digits
COUPON_BLOCKS = 3
COUPON_BLOCK_LENGTH = 4
_COUPON_ATTEMPTS = 10


def generate_coupon_code() -> str:
    """Random ``XXXX-XXXX-XXXX`` code over A-Z and 0-9."""
    return "-".join(
        "".join(secrets.choice(COUPON_ALPHABET) for _ in range(COUPON_BLOCK_LENGTH))
        for _ in range(COUPON_BLOCKS)
    )


async def _unused_coupon_code(db: AsyncSession) -> str:
    for _ in range(_COUPON_ATTEMPTS):
        code = generate_coupon_code()
        taken = await db.execute(select(Winner.id).where(Winner.coupon_code == code))
        if taken.first() is None:
            return code
    msg = "Could not generate a unique coupon code"
    raise InternalError(msg)


async def list_prizes(db: AsyncSession) -> Sequence[Prize]:
    """Active prizes still in stock, cheapest first."""
    result = await db.execute(
        select(Prize)
        .where(Prize.active.is_(True), Prize.quantity_available > 0)
        .order_by(Prize.points_required.asc(), Prize.id.asc())
    )
    return result.scalars().all()


async def redeem_prize(db: AsyncSession, user_id: int, prize_id: int) -> dict[str, Any]:
    """
    Spend the user's points on a prize and issue a coupon.

    Raises:
        NotFoundError: Unknown user or prize.
        ValidationError: Prize inactive or out of stock, or not enough points.
    """
    user = await require_user(db, user_id)
    prize = await db.get(Prize, prize_id)
    if prize is None:
        msg = "Prize not found"
        raise NotFoundError(msg)
    if not prize.active:
        msg = "This prize is not available"
        raise ValidationError(msg)
    if prize.quantity_available <= 0:
        msg = "Prize out of stock"
        raise ValidationError(msg)
    if user.points < prize.points_required:
        msg = f"Insufficient points: {prize.points_required} needed, {user.points} available"
        raise ValidationError(msg)

    cost = prize.points_required
    debited = await db.execute(
        update(User)
        .where(User.id == user_id, User.points >= cost)
        .values(points=User.points - cost)
        .returning(User.points)
    )
    remaining = debited.scalar_one_or_none()
    if remaining is None:
        await db.rollback()
        msg = "Insufficient points"
        raise ValidationError(msg)

    decremented = await db.execute(
        update(Prize)
        .where(Prize.id == prize_id, Prize.quantity_available > 0)
        .values(quantity_available=Prize.quantity_available - 1)
    )
    if decremented.rowcount != 1:
        await db.rollback()
        msg = "Prize out of stock"
        raise ValidationError(msg)

    try:
        code = await _unused_coupon_code(db)
    except InternalError:
        await db.rollback()
        raise
    winner = Winner(user_id=user_id, prize_id=prize_id, coupon_code=code, redemption_date=utcnow())
    db.add(winner)
    await db.flush()

    logger.info("prize_redeemed", user_id=user_id, prize_id=prize_id, points_spent=cost, winner_id=winner.id)
    return {
        "coupon_code": code,
        "prize_name": prize.name,
        "points_spent": cost,
        "remaining_points": remaining,
    }


async def get_redemption_history(db: AsyncSession, user_id: int) -> Sequence[Winner]:
    """The user's redemptions, newest first, with their prize loaded."""
    await require_user(db, user_id)
    result = await db.execute(
        select(Winner)
        .where(Winner.user_id == user_id)
        .order_by(Winner.redemption_date.desc(), Winner.id.desc())
    )
    return result.scalars().all()
