"""
Erroneous-sensor detection.

A node is flagged when its readings inside the anomaly window show any of:

- a reading outside the physically plausible band of its pollutant,
- a stuck sensor (fewer than ``MIN_DISTINCT_VALUES`` distinct values),
- a spread (max - min) wider than the pollutant's limit.

Nodes with fewer than ``MIN_SAMPLES`` readings in the window are never
flagged. Pure functions only; the caller fetches the readings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

POLLUTANTS = ("co", "o3", "no2")

PLAUSIBLE_RANGES: dict[str, tuple[float, float]] = {
    "co": (0.0, 50.0),
    "o3": (0.0, 500.0),
    "no2": (0.0, 500.0),
}

SPREAD_LIMITS: dict[str, float] = {
    "co": 100.0,
    "o3": 500.0,
    "no2": 300.0,
}

MIN_DISTINCT_VALUES = 3
MIN_SAMPLES = 3


class Reading(Protocol):
    co_value: float | None
    o3_value: float | None
    no2_value: float | None


def _values(readings: Iterable[Reading], pollutant: str) -> list[float]:
    attr = f"{pollutant}_value"
    return [value for value in (getattr(r, attr) for r in readings) if value is not None]


def detect_anomalies(readings: Sequence[Reading]) -> list[str]:
    """
    Return the anomaly codes found in ``readings`` (empty when healthy).

    Codes look like ``"co_out_of_range"``, ``"o3_stuck"`` or ``"no2_spread"``.

    >>> class R:
    ...     def __init__(self, co): self.co_value, self.o3_value, self.no2_value = co, None, None
    >>> detect_anomalies([R(1.0), R(1.0), R(1.0)])
    ['co_stuck']
    >>> detect_anomalies([R(1.0), R(1.0)])
    []
    """
    if len(readings) < MIN_SAMPLES:
        return []

    found: list[str] = []
    for pollutant in POLLUTANTS:
        values = _values(readings, pollutant)
        if not values:
            continue
        low, high = PLAUSIBLE_RANGES[pollutant]
        if any(v < low or v > high for v in values):
            found.append(f"{pollutant}_out_of_range")
        if len(values) >= MIN_SAMPLES and len(set(values)) < MIN_DISTINCT_VALUES:
            found.append(f"{pollutant}_stuck")
        if max(values) - min(values) > SPREAD_LIMITS[pollutant]:
            found.append(f"{pollutant}_spread")
    return found


def is_erroneous(readings: Sequence[Reading]) -> bool:
    return bool(detect_anomalies(readings))
