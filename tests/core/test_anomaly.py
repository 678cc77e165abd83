"""Tests for erroneous-sensor detection."""

from __future__ import annotations

from dataclasses import dataclass

from airwalk.nodes.anomaly import MIN_SAMPLES, detect_anomalies, is_erroneous


@dataclass
class Reading:
    co_value: float | None
    o3_value: float | None
    no2_value: float | None


def _healthy(n: int = 6) -> list[Reading]:
    return [Reading(0.5 + i * 0.1, 40.0 + i, 20.0 + 2 * i) for i in range(n)]


def test_healthy_node_is_not_flagged():
    assert detect_anomalies(_healthy()) == []
    assert not is_erroneous(_healthy())


def test_too_few_samples_never_flag():
    readings = [Reading(999.0, 999.0, 999.0)] * (MIN_SAMPLES - 1)
    assert detect_anomalies(readings) == []


def test_out_of_range_reading():
    readings = _healthy()
    readings.append(Reading(75.0, 40.0, 20.0))
    assert "co_out_of_range" in detect_anomalies(readings)


def test_negative_reading_is_out_of_range():
    readings = _healthy()
    readings.append(Reading(0.5, 40.0, -3.0))
    assert "no2_out_of_range" in detect_anomalies(readings)


def test_stuck_sensor():
    readings = [Reading(1.0, 40.0 + i, 20.0 + i) for i in range(3)]
    assert detect_anomalies(readings) == ["co_stuck"]


def test_two_distinct_values_is_still_stuck():
    readings = [Reading(1.0, 40.0 + i, 20.0 + i) for i in range(3)] + [Reading(2.0, 50.0, 30.0)]
    assert "co_stuck" in detect_anomalies(readings)


def test_spread_above_limit():
    readings = [Reading(0.5 + i, 40.0 + i, 20.0 + i) for i in range(4)]
    readings.append(Reading(0.6, 45.0, 400.0))
    anomalies = detect_anomalies(readings)
    assert "no2_spread" in anomalies
    assert "o3_spread" not in anomalies


def test_missing_pollutant_is_ignored():
    readings = [Reading(0.5 + i * 0.1, None, 20.0 + i) for i in range(4)]
    assert detect_anomalies(readings) == []
