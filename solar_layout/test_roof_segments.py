"""
test_roof_segments.py — Quality classes and provider segment parsing.
"""

from __future__ import annotations

import pytest

from solar_layout.geometry import Coordinate, bounds_of, center_of
from solar_layout.roof_segments import (
    MAX_SUNSHINE_SAMPLES,
    QUALITY_COLORS,
    QualityClass,
    classify,
    compass_direction,
    make_segment,
    parse_roof_segments,
)


@pytest.mark.parametrize("hours, expected", [
    (1500.0, QualityClass.EXCELLENT),
    (1200.0, QualityClass.EXCELLENT),
    (1199.9, QualityClass.GOOD),
    (1000.0, QualityClass.GOOD),
    (999.0, QualityClass.MODERATE),
    (800.0, QualityClass.MODERATE),
    (799.9, QualityClass.LOW),
    (0.0, QualityClass.LOW),
    (-50.0, QualityClass.LOW),
])
def test_classify_thresholds(hours, expected):
    assert classify(hours) is expected


def test_classify_is_monotonic():
    ranks = [classify(h).rank for h in range(-100, 2000, 25)]
    assert ranks == sorted(ranks)


def test_every_class_has_a_colour():
    assert set(QUALITY_COLORS) == set(QualityClass)


@pytest.mark.parametrize("azimuth, label", [
    (0.0, "N"), (359.0, "N"), (90.0, "E"), (135.0, "SE"),
    (180.0, "S"), (225.0, "SW"), (270.0, "W"), (-45.0, "NW"),
])
def test_compass_direction(azimuth, label):
    assert compass_direction(azimuth) == label


def test_make_segment_derives_missing_fields():
    b = bounds_of(53.0, -6.0, 0.0001, 0.0001)
    seg = make_segment(
        2, b, 30, 540, range(1000, 2600, 100),
        center=Coordinate(60.0, 0.0),   # outside the box
        area_m2=None,
    )
    assert seg.center == center_of(b)
    assert seg.area_m2 > 0
    assert seg.azimuth_degrees == pytest.approx(180.0)
    assert len(seg.monthly_sunshine_hours) == MAX_SUNSHINE_SAMPLES
    assert seg.quality_class is classify(seg.mean_sunshine_hours)


def test_segment_without_sunshine_is_low():
    seg = make_segment(0, bounds_of(0.0, 0.0, 0.0001, 0.0001), 0, 180, [])
    assert seg.mean_sunshine_hours == 0.0
    assert seg.quality_class is QualityClass.LOW


def test_parse_roof_segments_reads_provider_fields():
    solar_potential = {
        "roofSegmentStats": [
            {
                "pitchDegrees": 32.5,
                "azimuthDegrees": 181.2,
                "stats": {"areaMeters2": 55.0, "sunshineQuantiles": [1250, 1300, 1350]},
                "center": {"latitude": 53.35, "longitude": -6.26},
                "boundingBox": {
                    "sw": {"latitude": 53.3499, "longitude": -6.2602},
                    "ne": {"latitude": 53.3501, "longitude": -6.2598},
                },
            },
            {
                # corners swapped by the provider
                "pitchDegrees": 10.0,
                "azimuthDegrees": 0.0,
                "stats": {"areaMeters2": 20.0, "sunshineQuantiles": [500, 600]},
                "boundingBox": {
                    "sw": {"latitude": 53.3505, "longitude": -6.2590},
                    "ne": {"latitude": 53.3503, "longitude": -6.2594},
                },
            },
        ]
    }
    first, second = parse_roof_segments(solar_potential)

    assert first.index == 0
    assert first.area_m2 == 55.0
    assert first.quality_class is QualityClass.EXCELLENT
    assert first.center == Coordinate(53.35, -6.26)

    assert second.index == 1
    assert second.bounds.ne.latitude > second.bounds.sw.latitude
    assert second.bounds.ne.longitude > second.bounds.sw.longitude
    assert second.bounds.contains(second.center)
    assert second.quality_class is QualityClass.LOW


def test_parse_roof_segments_rejects_missing_box():
    with pytest.raises(KeyError):
        parse_roof_segments({"roofSegmentStats": [{"pitchDegrees": 10}]})


def test_as_dict_carries_display_fields():
    seg = make_segment(0, bounds_of(0.0, 0.0, 0.0001, 0.0001), 30, 200, [1300])
    row = seg.as_dict()
    assert row["quality_class"] == "EXCELLENT"
    assert row["direction"] == "S"
    assert row["color"] == QUALITY_COLORS[QualityClass.EXCELLENT]
