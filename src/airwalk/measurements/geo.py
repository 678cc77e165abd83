"""Great-circle distance and nearest-point lookup."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Protocol, TypeVar

EARTH_RADIUS_KM = 6371.0


class Located(Protocol):
    latitude: float | None
    longitude: float | None


T = TypeVar("T", bound=Located)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in kilometres.

    >>> round(haversine_km(0.0, 0.0, 0.0, 1.0), 2)
    111.19
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def nearest(lat: float, lon: float, points: Iterable[T]) -> tuple[T, float] | None:
    """
    The point closest to (lat, lon) and its distance in km.

    Points without coordinates are skipped. Ties keep the first point seen.
    Returns None when there is nothing to compare.
    """
    best: tuple[T, float] | None = None
    for point in points:
        if point.latitude is None or point.longitude is None:
            continue
        distance = haversine_km(lat, lon, point.latitude, point.longitude)
        if best is None or distance < best[1]:
            best = (point, distance)
    return best
