"""Schemas for measurement endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from airwalk.schemas import SuccessResponse


class MeasurementCreate(BaseModel):
    node_id: int
    co_value: float | None = None
    o3_value: float | None = None
    no2_value: float | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class MeasurementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    node_id: int
    timestamp: datetime
    co_value: float | None = None
    o3_value: float | None = None
    no2_value: float | None = None
    latitude: float | None = None
    longitude: float | None = None


class MeasurementCreatedResponse(SuccessResponse):
    measurement_id: int


class MeasurementListResponse(SuccessResponse):
    measurements: list[MeasurementOut]


class NearestMeasurement(BaseModel):
    measurement_id: int
    node_id: int
    timestamp: datetime
    o3_value: float | None = None
    no2_value: float | None = None
    distance_km: float


class NearestMeasurementResponse(SuccessResponse):
    data: NearestMeasurement


class FakeMeasurementsRequest(BaseModel):
    node_id: int
    count: int = 100
