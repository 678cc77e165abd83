"""Town hall lookup and registration applications."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.applications.schemas import ApplyRequest, ApplyResponse, TownHallItem, TownHallListResponse
from airwalk.applications.service import apply, delete_application, list_town_halls
from airwalk.database import get_session
from airwalk.schemas import SuccessResponse

router = APIRouter(tags=["Applications"])


@router.get("/getAyuntamientos", response_model=TownHallListResponse)
async def get_town_halls(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> TownHallListResponse:
    """List town halls for the application form."""
    town_halls = await list_town_halls(db)
    return TownHallListResponse(data=[TownHallItem.model_validate(t) for t in town_halls])


@router.post("/apply", response_model=ApplyResponse, status_code=201)
async def post_application(
    body: ApplyRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> ApplyResponse:
    """Submit a registration application."""
    application = await apply(
        db,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        dni=body.dni,
        phone=body.phone,
        town_hall_id=body.town_hall_id,
    )
    await db.commit()
    return ApplyResponse(message="Application received", application_id=application.id)


@router.delete("/application/{application_id}", response_model=SuccessResponse)
async def remove_application(
    application_id: int,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> SuccessResponse:
    await delete_application(db, application_id)
    await db.commit()
    return SuccessResponse(message="Application deleted")
