"""Schemas for town halls and applications."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from airwalk.schemas import SuccessResponse


class TownHallItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TownHallListResponse(SuccessResponse):
    data: list[TownHallItem]


class ApplyRequest(BaseModel):
    """Registration application. Every field is required."""

    first_name: str = Field(..., min_length=1, max_length=128)
    last_name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    dni: str = Field(..., min_length=2, max_length=16)
    phone: str = Field(..., min_length=1, max_length=32)
    town_hall_id: int


class ApplyResponse(SuccessResponse):
    application_id: int
