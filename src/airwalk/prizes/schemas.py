"""Schemas for prize endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from airwalk.schemas import SuccessResponse


class PrizeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    image_url: str | None = None
    points_required: int
    quantity_available: int
    initial_quantity: int


class PrizeListResponse(SuccessResponse):
    prizes: list[PrizeOut]


class RedeemRequest(BaseModel):
    user_id: int
    prize_id: int


class RedeemResponse(SuccessResponse):
    coupon_code: str
    prize_name: str
    points_spent: int
    remaining_points: int


class RedemptionOut(BaseModel):
    id: int
    coupon_code: str
    redemption_date: datetime
    prize_id: int
    prize_name: str
    description: str | None = None
    points_required: int
    image_url: str | None = None


class RedemptionHistoryResponse(SuccessResponse):
    redemptions: list[RedemptionOut]
