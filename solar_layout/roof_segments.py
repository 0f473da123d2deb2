"""
roof_segments.py — Normalised roof faces.

A RoofSegment is one planar face of the roof: its bounding box, centre,
area, pitch, azimuth and the sunshine samples reported for it.  Its
quality class is derived from mean sunshine so the two can never disagree.

Also converts the Google Solar ``roofSegmentStats`` list into segments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from solar_layout.config import (
    EXCELLENT_MIN_HOURS,
    GOOD_MIN_HOURS,
    MODERATE_MIN_HOURS,
)
from solar_layout.geometry import (
    Bounds,
    Coordinate,
    area,
    bounds_from_corners,
    center_of,
)

log = logging.getLogger(__name__)

MAX_SUNSHINE_SAMPLES = 12


class QualityClass(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    MODERATE = "MODERATE"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """3 for EXCELLENT down to 0 for LOW."""
        return _RANKS[self]


_RANKS = {
    QualityClass.EXCELLENT: 3,
    QualityClass.GOOD: 2,
    QualityClass.MODERATE: 1,
    QualityClass.LOW: 0,
}

# Map overlay colours, red (best) to blue (worst)
QUALITY_COLORS = {
    QualityClass.EXCELLENT: "#EF4444",
    QualityClass.GOOD: "#F97316",
    QualityClass.MODERATE: "#10B981",
    QualityClass.LOW: "#3B82F6",
}


def classify(mean_sunshine_hours: float) -> QualityClass:
    """Bucket mean yearly sunshine hours; total over all real numbers."""
    if mean_sunshine_hours >= EXCELLENT_MIN_HOURS:
        return QualityClass.EXCELLENT
    if mean_sunshine_hours >= GOOD_MIN_HOURS:
        return QualityClass.GOOD
    if mean_sunshine_hours >= MODERATE_MIN_HOURS:
        return QualityClass.MODERATE
    return QualityClass.LOW


def compass_direction(azimuth: float) -> str:
    """8-point compass label for an azimuth in degrees (180 = S)."""
    dirs = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
    return dirs[int(((azimuth % 360.0) + 22.5) // 45.0) % 8]


@dataclass(frozen=True)
class RoofSegment:
    """One roof face.  ``index`` is its position in the building's list."""
    index: int
    bounds: Bounds
    center: Coordinate
    area_m2: float
    pitch_degrees: float
    azimuth_degrees: float
    monthly_sunshine_hours: tuple[float, ...] = ()

    @property
    def mean_sunshine_hours(self) -> float:
        hours = self.monthly_sunshine_hours
        return sum(hours) / len(hours) if hours else 0.0

    @property
    def quality_class(self) -> QualityClass:
        return classify(self.mean_sunshine_hours)

    @property
    def color(self) -> str:
        return QUALITY_COLORS[self.quality_class]

    def as_dict(self) -> dict:
        return {
            "index": self.index,
            "bounds": {
                "ne": [self.bounds.ne.latitude, self.bounds.ne.longitude],
                "sw": [self.bounds.sw.latitude, self.bounds.sw.longitude],
            },
            "center": [self.center.latitude, self.center.longitude],
            "area_m2": round(self.area_m2, 2),
            "pitch_degrees": round(self.pitch_degrees, 1),
            "azimuth_degrees": round(self.azimuth_degrees, 1),
            "direction": compass_direction(self.azimuth_degrees),
            "quality_class": self.quality_class.value,
            "mean_sunshine_hours": round(self.mean_sunshine_hours, 1),
            "color": self.color,
        }


def make_segment(
    index: int,
    bounds: Bounds,
    pitch_degrees: float,
    azimuth_degrees: float,
    sunshine_hours,
    *,
    center: Coordinate | None = None,
    area_m2: float | None = None,
) -> RoofSegment:
    """
    Build a segment, filling in what the caller does not know.

    A *center* outside *bounds* is replaced by the box midpoint; a missing
    or non-positive *area_m2* is computed from the box.
    """
    if center is None or not bounds.contains(center):
        center = center_of(bounds)
    if area_m2 is None or area_m2 <= 0:
        area_m2 = area(bounds)
    samples = tuple(float(h) for h in list(sunshine_hours)[:MAX_SUNSHINE_SAMPLES])
    return RoofSegment(
        index=index,
        bounds=bounds,
        center=center,
        area_m2=float(area_m2),
        pitch_degrees=float(pitch_degrees),
        azimuth_degrees=float(azimuth_degrees) % 360.0,
        monthly_sunshine_hours=samples,
    )


# ── Provider payload ─────────────────────────────────────────────────────────

def _coordinate(raw: dict) -> Coordinate:
    return Coordinate(float(raw["latitude"]), float(raw["longitude"]))


def parse_roof_segments(solar_potential: dict) -> list[RoofSegment]:
    """
    Convert ``solarPotential.roofSegmentStats`` into RoofSegments.

    Raises KeyError / TypeError / ValueError on a malformed entry; the
    orchestrator treats that as a provider failure.
    """
    segments: list[RoofSegment] = []
    for i, raw in enumerate(solar_potential.get("roofSegmentStats", [])):
        box = raw["boundingBox"]
        sw = _coordinate(box["sw"])
        ne = _coordinate(box["ne"])
        bounds = bounds_from_corners(sw, ne)
        if bounds.sw != sw or bounds.ne != ne:
            log.warning("  Segment %d: bounding box re-ordered or padded", i)

        stats = raw.get("stats", {})
        center = _coordinate(raw["center"]) if "center" in raw else None
        segments.append(make_segment(
            i,
            bounds,
            raw.get("pitchDegrees", 0.0),
            raw.get("azimuthDegrees", 0.0),
            stats.get("sunshineQuantiles", []),
            center=center,
            area_m2=stats.get("areaMeters2"),
        ))
    return segments
