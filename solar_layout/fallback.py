"""
fallback.py — Synthetic roof for locations without imagery coverage.

When the provider answers BUILDING_NOT_FOUND the rest of the pipeline
still needs segments and candidates.  This module fabricates a plausible
four-face roof around the queried point:

    ┌───────────┬───────────┐    north
    │  3  E     │  2  SW    │
    │   low     │  moderate │
    ├───────────┼───────────┤
    │  0  S     │  1  SW    │
    │ excellent │   good    │
    └───────────┴───────────┘    south

Faces are separated by a 1 m gap and all lie within ~15 m of the point.
Geometry depends only on the coordinate; jitter on candidate energy is
seeded from it too, so the whole profile is reproducible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from solar_layout.config import (
    FALLBACK_CURRENCY,
    FALLBACK_MAX_PANELS,
    FALLBACK_MONTHLY_BILL,
)
from solar_layout.geometry import Coordinate, bounds_of, meters_to_lat, meters_to_lng
from solar_layout.panel_grid import (
    PanelDimensions,
    allocate_panel_targets,
    generate_candidates,
)
from solar_layout.profile import BuildingProfile, ImageryQuality, MonthlyBill
from solar_layout.roof_segments import RoofSegment, make_segment

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class _FaceTemplate:
    north_m: float       # centre offset from the queried point
    east_m: float
    depth_m: float       # north-south extent
    width_m: float       # east-west extent
    pitch: float
    azimuth: float
    sunshine: tuple[float, ...]


FALLBACK_FACES = (
    # South, excellent
    _FaceTemplate(-4.5, -7.0, 7.0, 12.0, 35.0, 180.0,
                  (1250.0, 1300.0, 1350.0, 1400.0, 1450.0, 1500.0)),
    # South-west, good
    _FaceTemplate(-4.0, 6.0, 6.0, 10.0, 30.0, 225.0,
                  (1000.0, 1030.0, 1060.0, 1090.0, 1120.0, 1150.0)),
    # South-west, moderate
    _FaceTemplate(4.0, 5.5, 6.0, 9.0, 30.0, 235.0,
                  (820.0, 860.0, 900.0, 940.0, 960.0, 980.0)),
    # East, low
    _FaceTemplate(3.5, -5.0, 5.0, 8.0, 25.0, 90.0,
                  (650.0, 680.0, 710.0, 740.0, 760.0, 780.0)),
)


def synthesize_segments(coordinate: Coordinate) -> list[RoofSegment]:
    """The four fallback faces, anchored at *coordinate*."""
    segments: list[RoofSegment] = []
    for i, face in enumerate(FALLBACK_FACES):
        center = coordinate.offset(face.north_m, face.east_m)
        bounds = bounds_of(
            center.latitude,
            center.longitude,
            meters_to_lng(face.width_m / 2, coordinate.latitude),
            meters_to_lat(face.depth_m / 2),
        )
        segments.append(make_segment(
            i, bounds, face.pitch, face.azimuth, face.sunshine, center=center,
        ))
    return segments


def synthesize_profile(coordinate: Coordinate) -> BuildingProfile:
    """
    Build a complete BuildingProfile for *coordinate* from fabricated data.

    Never raises for a finite coordinate.  ``max_panels`` is fixed at
    FALLBACK_MAX_PANELS and imagery quality is always LOW.
    """
    log.info("  Synthesizing fallback roof at (%.6f, %.6f)",
             coordinate.latitude, coordinate.longitude)

    panel = PanelDimensions()
    segments = synthesize_segments(coordinate)
    targets = allocate_panel_targets(segments, FALLBACK_MAX_PANELS)
    layouts, candidates = generate_candidates(segments, targets, coordinate, panel)

    return BuildingProfile(
        building_id=f"fallback_{coordinate.latitude}_{coordinate.longitude}",
        requested=coordinate,
        center=coordinate,
        total_roof_area_m2=sum(s.area_m2 for s in segments),
        max_panels=FALLBACK_MAX_PANELS,
        imagery_quality=ImageryQuality.LOW,
        segments=tuple(segments),
        candidates=tuple(candidates),
        layouts=tuple(layouts),
        panel_dimensions=panel,
        monthly_bill=MonthlyBill(FALLBACK_CURRENCY, FALLBACK_MONTHLY_BILL),
        is_fallback=True,
    )
