"""Air-quality summary endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.air_quality.schemas import AirQualitySummaryResponse
from airwalk.air_quality.service import get_air_quality_summary
from airwalk.database import get_session

router = APIRouter(tags=["Air quality"])


@router.get("/usuario/calidad-aire-resumen", response_model=AirQualitySummaryResponse)
async def air_quality_summary(
    user_id: int = Query(..., alias="userId"),
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> AirQualitySummaryResponse:
    """Air quality, activity totals and chart for the last hours of the user's node."""
    summary = await get_air_quality_summary(db, user_id)
    return AirQualitySummaryResponse(**summary)
