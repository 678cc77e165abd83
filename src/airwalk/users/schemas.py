"""Request/response schemas for user endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from airwalk.schemas import SuccessResponse


class TownHallInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    province: str | None = None


class UserProfile(BaseModel):
    """Full profile of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    points: int
    active_hours: float
    total_distance: float
    photo_url: str | None = None
    town_hall: TownHallInfo | None = None
    role: str | None = None


class UserProfileResponse(SuccessResponse):
    user: UserProfile


class UserUpdateRequest(BaseModel):
    """Partial account update. A new password requires the current one."""

    username: str | None = Field(None, min_length=3, max_length=64)
    email: EmailStr | None = None
    current_password: str | None = Field(None, max_length=128)
    new_password: str | None = Field(None, max_length=128)


class ActivityRequest(BaseModel):
    user_id: int
    time: float = Field(..., ge=0)
    distance: float = Field(..., ge=0)


class ActivityResponse(SuccessResponse):
    active_hours: float
    total_distance: float


class DailyStatsRequest(BaseModel):
    user_id: int
    active_hours: float = Field(0.0, ge=0)
    distance: float = Field(0.0, ge=0)
    points: int = Field(0, ge=0)


class PointsResponse(SuccessResponse):
    user_id: int
    points: int


class AddPointsRequest(BaseModel):
    user_id: int
    points: int
