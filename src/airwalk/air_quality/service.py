"""Air-quality summary for a user's linked node."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import func, select

from airwalk.air_quality.classifier import chart_series, classify_air_quality
from airwalk.config import get_settings
from airwalk.db.models import DailyStats, Measurement
from airwalk.nodes.service import get_linked_node
from airwalk.timeutils import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def rolling_activity(db: AsyncSession, user_id: int, window_hours: int | None = None) -> dict[str, float | int]:
    """
    Time, distance and points logged by the user inside the trailing window.

    All three are zero when nothing was logged.
    """
    hours = window_hours if window_hours is not None else get_settings().air_quality_window_hours
    cutoff = utcnow() - timedelta(hours=hours)
    result = await db.execute(
        select(
            func.coalesce(func.sum(DailyStats.active_hours), 0.0),
            func.coalesce(func.sum(DailyStats.distance), 0.0),
            func.coalesce(func.sum(DailyStats.points), 0),
        ).where(DailyStats.user_id == user_id, DailyStats.timestamp >= cutoff)
    )
    time_hours, distance, points = result.one()
    return {"time_hours": float(time_hours), "distance_km": float(distance), "points": int(points)}


async def recent_measurements(db: AsyncSession, node_id: int, window_hours: int) -> Sequence[Measurement]:
    cutoff = utcnow() - timedelta(hours=window_hours)
    result = await db.execute(
        select(Measurement)
        .where(Measurement.node_id == node_id, Measurement.timestamp >= cutoff)
        .order_by(Measurement.timestamp.asc(), Measurement.id.asc())
    )
    return result.scalars().all()


async def get_air_quality_summary(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """
    Build the summary shown on the user's home screen.

    Resolves the user's active node, reads its measurements inside the rolling
    window once, then derives the classification and chart from that set and
    the activity totals from the ledger.

    Raises:
        NotFoundError: Unknown user or no linked node.
    """
    settings = get_settings()
    window = settings.air_quality_window_hours
    node = await get_linked_node(db, user_id)

    measurements = await recent_measurements(db, node.id, window)
    status, summary_text = classify_air_quality(measurements)
    activity = await rolling_activity(db, user_id, window)
    graph = chart_series(measurements, ZoneInfo(settings.display_timezone))

    logger.debug("air_quality_summary", user_id=user_id, node_id=node.id, samples=len(measurements))
    return {
        "node_id": node.id,
        "status": status.value,
        "summary_text": summary_text,
        "time_hours": activity["time_hours"],
        "distance_km": activity["distance_km"],
        "points": activity["points"],
        "graph": graph,
    }
