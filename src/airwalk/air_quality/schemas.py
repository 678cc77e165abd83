"""Schemas for the air-quality summary."""

from __future__ import annotations

from pydantic import BaseModel

from airwalk.schemas import SuccessResponse


class ChartSeries(BaseModel):
    """Parallel sequences, oldest reading first."""

    timestamps: list[str]
    index: list[float]
    o3: list[float]
    no2: list[float]
    co: list[float]


class AirQualitySummaryResponse(SuccessResponse):
    node_id: int
    status: str
    summary_text: str
    time_hours: float
    distance_km: float
    points: int
    graph: ChartSeries
