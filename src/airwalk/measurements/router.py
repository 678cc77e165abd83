"""Measurement endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.database import get_session
from airwalk.measurements.schemas import (
    FakeMeasurementsRequest,
    MeasurementCreate,
    MeasurementCreatedResponse,
    MeasurementListResponse,
    MeasurementOut,
    NearestMeasurement,
    NearestMeasurementResponse,
)
from airwalk.measurements.service import (
    generate_fake_measurements,
    get_nearest_measurement,
    insert_measurement,
    list_measurements,
    parse_coordinates,
)

router = APIRouter(prefix="/measurements", tags=["Measurements"])


@router.post("", response_model=MeasurementCreatedResponse, status_code=201)
async def post_measurement(
    body: MeasurementCreate,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> MeasurementCreatedResponse:
    """Ingest one reading from a node."""
    measurement = await insert_measurement(
        db,
        body.node_id,
        co=body.co_value,
        o3=body.o3_value,
        no2=body.no2_value,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    await db.commit()
    return MeasurementCreatedResponse(message="Measurement stored", measurement_id=measurement.id)


@router.get("", response_model=MeasurementListResponse)
async def get_measurements(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> MeasurementListResponse:
    measurements = await list_measurements(db)
    return MeasurementListResponse(measurements=[MeasurementOut.model_validate(m) for m in measurements])


@router.get("/closest/{latitude}/{longitude}", response_model=NearestMeasurementResponse)
async def get_closest_measurement(
    latitude: str,
    longitude: str,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> NearestMeasurementResponse:
    """O3/NO2 readings of the measurement nearest to the point."""
    lat, lon = parse_coordinates(latitude, longitude)
    nearest = await get_nearest_measurement(db, lat, lon)
    return NearestMeasurementResponse(data=NearestMeasurement(**nearest))


@router.post("/fake", response_model=MeasurementListResponse, status_code=201)
async def post_fake_measurements(
    body: FakeMeasurementsRequest,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> MeasurementListResponse:
    """Generate synthetic readings for a node (test and demo data)."""
    measurements = await generate_fake_measurements(db, body.node_id, body.count)
    await db.commit()
    return MeasurementListResponse(
        message=f"{len(measurements)} measurements generated",
        measurements=[MeasurementOut.model_validate(m) for m in measurements],
    )
