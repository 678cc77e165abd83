"""Tests for air-quality classification and chart projection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from airwalk.air_quality.classifier import (
    NO_DATA_SUMMARY,
    SUMMARIES,
    AirQualityBand,
    band_for_index,
    chart_series,
    classify_air_quality,
    normalized_index,
)

BASE = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)


@dataclass
class Sample:
    timestamp: datetime
    co_value: float | None = None
    o3_value: float | None = None
    no2_value: float | None = None


class TestNormalizedIndex:
    def test_takes_worst_pollutant(self):
        assert normalized_index(o3=20, no2=80, co=0.5) == pytest.approx(0.8)
        assert normalized_index(o3=20, no2=10, co=1.5) == pytest.approx(0.75)

    def test_missing_values_count_as_zero(self):
        assert normalized_index(None, None, None) == 0.0
        assert normalized_index(None, 40, None) == pytest.approx(0.4)


class TestBands:
    @pytest.mark.parametrize(
        ("index", "band"),
        [
            (0.0, AirQualityBand.GOOD),
            (0.29, AirQualityBand.GOOD),
            (0.3, AirQualityBand.ACCEPTABLE),
            (0.49, AirQualityBand.ACCEPTABLE),
            (0.5, AirQualityBand.SPIKES),
            (0.79, AirQualityBand.SPIKES),
            (0.8, AirQualityBand.POOR),
            (3.0, AirQualityBand.POOR),
        ],
    )
    def test_band_boundaries(self, index, band):
        assert band_for_index(index) is band

    def test_clean_window_is_good(self):
        samples = [Sample(BASE, co_value=0.2, o3_value=10, no2_value=5) for _ in range(5)]
        band, text = classify_air_quality(samples)
        assert band is AirQualityBand.GOOD
        assert text == SUMMARIES[AirQualityBand.GOOD]

    def test_worst_reading_drives_the_band(self):
        samples = [
            Sample(BASE, o3_value=10),
            Sample(BASE + timedelta(minutes=5), o3_value=60),
            Sample(BASE + timedelta(minutes=10), o3_value=15),
        ]
        band, text = classify_air_quality(samples)
        assert band is AirQualityBand.SPIKES
        assert text == SUMMARIES[AirQualityBand.SPIKES]

    def test_empty_window_defaults_to_good_with_note(self):
        band, text = classify_air_quality([])
        assert band is AirQualityBand.GOOD
        assert text == NO_DATA_SUMMARY

    def test_every_band_has_a_summary(self):
        assert set(SUMMARIES) == set(AirQualityBand)


class TestChartSeries:
    def test_parallel_sequences_in_time_order(self):
        samples = [
            Sample(BASE + timedelta(minutes=30), co_value=1.0, o3_value=30, no2_value=20),
            Sample(BASE, co_value=0.5, o3_value=10, no2_value=40),
        ]
        series = chart_series(samples, timezone.utc)
        assert series["timestamps"] == ["09:00", "09:30"]
        assert series["o3"] == [10, 30]
        assert series["no2"] == [40, 20]
        assert series["co"] == [0.5, 1.0]
        assert series["index"] == [pytest.approx(0.4), pytest.approx(0.5)]
        assert len({len(v) for v in series.values()}) == 1

    def test_labels_use_display_timezone(self):
        series = chart_series([Sample(BASE)], ZoneInfo("Europe/Madrid"))
        # January: CET is UTC+1
        assert series["timestamps"] == ["10:00"]

    def test_naive_timestamps_are_utc(self):
        series = chart_series([Sample(BASE.replace(tzinfo=None), o3_value=None)], timezone.utc)
        assert series["timestamps"] == ["09:00"]
        assert series["o3"] == [0.0]

    def test_empty(self):
        assert chart_series([], timezone.utc) == {"timestamps": [], "index": [], "o3": [], "no2": [], "co": []}
