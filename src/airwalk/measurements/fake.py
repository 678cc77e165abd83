"""Synthetic measurements inside the Gandia city-centre test area."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any

from shapely.geometry import Point, Polygon

# (latitude, longitude) vertices, closed
GANDIA_CENTRE_VERTICES: list[tuple[float, float]] = [
    (38.97619486753026, -0.18349714625501487),
    (38.97333777022671, -0.17411600294874113),
    (38.96897671527094, -0.17846807974031142),
    (38.97160841849363, -0.18649524360031886),
    (38.97619486753026, -0.18349714625501487),
]

# shapely works in (x, y) = (longitude, latitude)
GANDIA_CENTRE = Polygon([(lon, lat) for lat, lon in GANDIA_CENTRE_VERTICES])

FAKE_CO = 1.0
FAKE_O3 = 50.0
FAKE_NO2 = 50.0


def random_point_in(area: Polygon, rng: random.Random) -> tuple[float, float]:
    """Uniform random (latitude, longitude) inside ``area`` by rejection sampling."""
    min_x, min_y, max_x, max_y = area.bounds
    while True:
        lon = rng.uniform(min_x, max_x)
        lat = rng.uniform(min_y, max_y)
        if area.contains(Point(lon, lat)):
            return lat, lon


def fake_readings(
    count: int,
    now: datetime,
    days_back: int,
    rng: random.Random | None = None,
    area: Polygon = GANDIA_CENTRE,
) -> list[dict[str, Any]]:
    """Build ``count`` readings with random positions in ``area`` and random times in the trailing window."""
    rng = rng or random.Random()
    window = timedelta(days=days_back).total_seconds()
    readings = []
    for _ in range(count):
        lat, lon = random_point_in(area, rng)
        readings.append(
            {
                "timestamp": now - timedelta(seconds=rng.uniform(0, window)),
                "co_value": FAKE_CO,
                "o3_value": FAKE_O3,
                "no2_value": FAKE_NO2,
                "latitude": lat,
                "longitude": lon,
            }
        )
    return readings
