"""Prize catalogue, redemption and redemption history."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.database import get_session
from airwalk.db.models import Winner
from airwalk.prizes.schemas import (
    PrizeListResponse,
    PrizeOut,
    RedeemRequest,
    RedeemResponse,
    RedemptionHistoryResponse,
    RedemptionOut,
)
from airwalk.prizes.service import get_redemption_history, list_prizes, redeem_prize

router = APIRouter(tags=["Prizes"])


def _redemption(winner: Winner) -> RedemptionOut:
    return RedemptionOut(
        id=winner.id,
        coupon_code=winner.coupon_code,
        redemption_date=winner.redemption_date,
        prize_id=winner.prize_id,
        prize_name=winner.prize.name,
        description=winner.prize.description,
        points_required=winner.prize.points_required,
        image_url=winner.prize.image_url,
    )


@router.get("/prizes", response_model=PrizeListResponse)
async def get_prizes(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> PrizeListResponse:
    prizes = await list_prizes(db)
    return PrizeListResponse(prizes=[PrizeOut.model_validate(p) for p in prizes])


@router.post("/redeem", response_model=RedeemResponse)
async def post_redeem(
    body: RedeemRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> RedeemResponse:
    """Redeem points for a prize. Returns the coupon code."""
    result = await redeem_prize(db, body.user_id, body.prize_id)
    await db.commit()
    return RedeemResponse(message="Prize redeemed", **result)


@router.get("/redemptions/{user_id}", response_model=RedemptionHistoryResponse)
async def get_redemptions(
    user_id: int,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> RedemptionHistoryResponse:
    winners = await get_redemption_history(db, user_id)
    return RedemptionHistoryResponse(redemptions=[_redemption(w) for w in winners])
