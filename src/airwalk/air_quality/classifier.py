"""
Air-quality classification and chart projection.

Each reading is reduced to a dimensionless index, ``max(O3/100, NO2/100, CO/2)``;
a window is classified by its worst reading. Missing pollutant values count
as zero.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from datetime import tzinfo
from typing import Any, Protocol

from airwalk.timeutils import as_utc

O3_SCALE = 100.0
NO2_SCALE = 100.0
CO_SCALE = 2.0


class AirQualityBand(str, enum.Enum):
    """Severity bands, mildest first."""

    GOOD = "good"
    ACCEPTABLE = "acceptable"
    SPIKES = "spikes"
    POOR = "poor"


# Upper (exclusive) index bound of each band; anything above the last is POOR
BAND_UPPER_BOUNDS: tuple[tuple[float, AirQualityBand], ...] = (
    (0.3, AirQualityBand.GOOD),
    (0.5, AirQualityBand.ACCEPTABLE),
    (0.8, AirQualityBand.SPIKES),
)

SUMMARIES: dict[AirQualityBand, str] = {
    AirQualityBand.GOOD: "Air quality has been good.",
    AirQualityBand.ACCEPTABLE: "Air quality has been acceptable.",
    AirQualityBand.SPIKES: "Several pollution spikes were detected.",
    AirQualityBand.POOR: "Air quality has been poor.",
}

NO_DATA_SUMMARY = "No recent measurements; air quality is assumed to have been good."


class Sample(Protocol):
    timestamp: Any
    co_value: float | None
    o3_value: float | None
    no2_value: float | None


def normalized_index(o3: float | None, no2: float | None, co: float | None) -> float:
    """
    Composite pollution index of one reading.

    >>> normalized_index(50, 20, 1.0)
    0.5
    >>> normalized_index(None, None, None)
    0.0
    """
    return max((o3 or 0.0) / O3_SCALE, (no2 or 0.0) / NO2_SCALE, (co or 0.0) / CO_SCALE)


def band_for_index(index: float) -> AirQualityBand:
    for upper, band in BAND_UPPER_BOUNDS:
        if index < upper:
            return band
    return AirQualityBand.POOR


def classify_air_quality(samples: Iterable[Sample]) -> tuple[AirQualityBand, str]:
    """Band and summary text for a window, driven by its worst reading."""
    indexes = [normalized_index(s.o3_value, s.no2_value, s.co_value) for s in samples]
    if not indexes:
        return AirQualityBand.GOOD, NO_DATA_SUMMARY
    band = band_for_index(max(indexes))
    return band, SUMMARIES[band]


def chart_series(samples: Sequence[Sample], tz: tzinfo) -> dict[str, list[Any]]:
    """
    Project readings into parallel, time-ordered chart sequences.

    Labels are ``HH:MM`` in ``tz``; pollutant values default to 0 when missing.
    """
    ordered = sorted(samples, key=lambda s: as_utc(s.timestamp))
    series: dict[str, list[Any]] = {"timestamps": [], "index": [], "o3": [], "no2": [], "co": []}
    for s in ordered:
        o3, no2, co = s.o3_value or 0.0, s.no2_value or 0.0, s.co_value or 0.0
        series["timestamps"].append(as_utc(s.timestamp).astimezone(tz).strftime("%H:%M"))
        series["index"].append(normalized_index(o3, no2, co))
        series["o3"].append(o3)
        series["no2"].append(no2)
        series["co"].append(co)
    return series
