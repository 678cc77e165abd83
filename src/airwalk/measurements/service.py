"""Measurement ingestion, listing, nearest lookup and synthetic data."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from airwalk.config import get_settings
from airwalk.db.models import Measurement, Node
from airwalk.errors import NotFoundError, ValidationError
from airwalk.measurements.fake import fake_readings
from airwalk.measurements.geo import nearest
from airwalk.timeutils import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def _require_node(db: AsyncSession, node_id: int) -> Node:
    node = await db.get(Node, node_id)
    if node is None:
        msg = "Node not found"
        raise NotFoundError(msg)
    return node


async def insert_measurement(
    db: AsyncSession,
    node_id: int,
    co: float | None,
    o3: float | None,
    no2: float | None,
    latitude: float | None = None,
    longitude: float | None = None,
) -> Measurement:
    """Store a reading from ``node_id`` stamped with the current time."""
    await _require_node(db, node_id)
    measurement = Measurement(
        node_id=node_id,
        timestamp=utcnow(),
        co_value=co,
        o3_value=o3,
        no2_value=no2,
        latitude=latitude,
        longitude=longitude,
    )
    db.add(measurement)
    await db.flush()
    logger.debug("measurement_inserted", measurement_id=measurement.id, node_id=node_id)
    return measurement


async def list_measurements(db: AsyncSession) -> Sequence[Measurement]:
    result = await db.execute(select(Measurement).order_by(Measurement.timestamp.asc(), Measurement.id.asc()))
    return result.scalars().all()


def parse_coordinates(latitude: str | float, longitude: str | float) -> tuple[float, float]:
    """
    Parse a latitude/longitude pair.

    Raises:
        ValidationError: Not finite numbers, or outside the valid ranges.
    """
    try:
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError):
        msg = "Latitude and longitude must be numbers"
        raise ValidationError(msg) from None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        msg = "Latitude and longitude must be finite numbers"
        raise ValidationError(msg)
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        msg = "Latitude must be within [-90, 90] and longitude within [-180, 180]"
        raise ValidationError(msg)
    return lat, lon


async def get_nearest_measurement(db: AsyncSession, latitude: float, longitude: float) -> dict[str, Any]:
    """
    The O3/NO2 readings of the measurement closest to the given point.

    Scans every located measurement.

    Raises:
        NotFoundError: No measurement has coordinates.
    """
    result = await db.execute(
        select(
            Measurement.id,
            Measurement.node_id,
            Measurement.timestamp,
            Measurement.o3_value,
            Measurement.no2_value,
            Measurement.latitude,
            Measurement.longitude,
        )
        .where(Measurement.latitude.is_not(None), Measurement.longitude.is_not(None))
        .order_by(Measurement.id)
    )
    found = nearest(latitude, longitude, result.all())
    if found is None:
        msg = "No measurements available"
        raise NotFoundError(msg)
    row, distance = found
    return {
        "measurement_id": row.id,
        "node_id": row.node_id,
        "timestamp": row.timestamp,
        "o3_value": row.o3_value,
        "no2_value": row.no2_value,
        "distance_km": distance,
    }


async def generate_fake_measurements(db: AsyncSession, node_id: int, count: int) -> list[Measurement]:
    """
    Insert ``count`` synthetic readings for ``node_id`` inside the test area.

    Raises:
        ValidationError: ``count`` outside 1..fake_measurements_max.
        NotFoundError: Unknown node.
    """
    settings = get_settings()
    if not 1 <= count <= settings.fake_measurements_max:
        msg = f"Count must be between 1 and {settings.fake_measurements_max}"
        raise ValidationError(msg)
    await _require_node(db, node_id)

    measurements = [
        Measurement(node_id=node_id, **reading)
        for reading in fake_readings(count, utcnow(), settings.fake_measurements_days_back)
    ]
    db.add_all(measurements)
    await db.flush()
    logger.info("fake_measurements_generated", node_id=node_id, count=count)
    return measurements
