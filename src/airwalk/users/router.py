"""User endpoints: profile, activity ledger and points."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.auth.dependencies import get_current_user
from airwalk.auth.service import require_user
from airwalk.database import get_session
from airwalk.db.models import User
from airwalk.schemas import SuccessResponse
from airwalk.users.schemas import (
    ActivityRequest,
    ActivityResponse,
    AddPointsRequest,
    DailyStatsRequest,
    PointsResponse,
    TownHallInfo,
    UserProfile,
    UserProfileResponse,
    UserUpdateRequest,
)
from airwalk.users.service import add_daily_stats, add_points, get_points, update_activity, update_user

router = APIRouter(tags=["Users"])


def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        points=user.points,
        active_hours=user.active_hours,
        total_distance=user.total_distance,
        photo_url=user.photo_url,
        town_hall=TownHallInfo.model_validate(user.town_hall) if user.town_hall else None,
        role=user.role.name if user.role else None,
    )


# ---------------------------------------------------------------------------
# Activity (declared before /user/{user_id} so the literal path wins)
# ---------------------------------------------------------------------------


@router.put("/user/activity", response_model=ActivityResponse)
async def put_activity(
    body: ActivityRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> ActivityResponse:
    """Add a walk's time and distance to the user's totals."""
    user = await update_activity(db, body.user_id, body.time, body.distance)
    await db.commit()
    return ActivityResponse(
        message="Activity updated",
        active_hours=user.active_hours,
        total_distance=user.total_distance,
    )


@router.post("/user/daily-stats", response_model=SuccessResponse, status_code=201)
async def post_daily_stats(
    body: DailyStatsRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> SuccessResponse:
    """Record one walking session in the activity ledger."""
    await add_daily_stats(db, body.user_id, body.active_hours, body.distance, body.points)
    await db.commit()
    return SuccessResponse(message="Daily stats added")


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserProfileResponse)
async def get_me(
    user: User = Depends(get_current_user),  # noqa: B008
) -> UserProfileResponse:
    """Profile of the user behind the bearer token issued by /login."""
    return UserProfileResponse(user=_profile(user))


@router.get("/user/{user_id}", response_model=UserProfileResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> UserProfileResponse:
    """Get a user's profile with town hall and role."""
    user = await require_user(db, user_id)
    return UserProfileResponse(user=_profile(user))


@router.put("/user/{user_id}", response_model=SuccessResponse)
async def put_user(
    user_id: int,
    body: UserUpdateRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> SuccessResponse:
    """Update username, email and/or password."""
    await update_user(
        db,
        user_id,
        username=body.username,
        email=body.email,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    await db.commit()
    return SuccessResponse(message="User updated")


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


@router.get("/points/{user_id}", response_model=PointsResponse)
async def read_points(
    user_id: int,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> PointsResponse:
    points = await get_points(db, user_id)
    return PointsResponse(user_id=user_id, points=points)


@router.put("/points", response_model=PointsResponse)
async def award_points(
    body: AddPointsRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> PointsResponse:
    """Award points to a user. Returns the new total."""
    total = await add_points(db, body.user_id, body.points)
    await db.commit()
    return PointsResponse(message="Points added", user_id=body.user_id, points=total)
