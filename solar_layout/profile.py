"""
profile.py — BuildingProfile, the engine's per-coordinate result.

A profile is built once per lookup and never mutated.  ``requested`` is
the coordinate the lookup was made for; callers dragging the map pin can
compare it with their latest coordinate and drop stale results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from solar_layout.geometry import Coordinate
from solar_layout.panel_grid import PanelCandidate, PanelDimensions, SegmentLayout
from solar_layout.roof_segments import RoofSegment


class ImageryQuality(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def parse(cls, value) -> ImageryQuality:
        """Unknown or missing values count as LOW."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.LOW


@dataclass(frozen=True)
class MonthlyBill:
    currency: str
    amount: float


@dataclass(frozen=True)
class BuildingProfile:
    building_id: str
    requested: Coordinate
    center: Coordinate
    total_roof_area_m2: float
    max_panels: int
    imagery_quality: ImageryQuality
    segments: tuple[RoofSegment, ...]
    candidates: tuple[PanelCandidate, ...]
    panel_dimensions: PanelDimensions = field(default_factory=PanelDimensions)
    monthly_bill: MonthlyBill | None = None
    layouts: tuple[SegmentLayout, ...] = ()
    is_fallback: bool = False

    def is_for(self, coordinate: Coordinate) -> bool:
        """True if this profile was computed for *coordinate*."""
        return self.requested == coordinate

    def segment(self, index: int) -> RoofSegment:
        return self.segments[index]

    def summary(self) -> dict:
        return {
            "building_id": self.building_id,
            "requested": [self.requested.latitude, self.requested.longitude],
            "center": [self.center.latitude, self.center.longitude],
            "total_roof_area_m2": round(self.total_roof_area_m2, 2),
            "max_panels": self.max_panels,
            "candidate_count": len(self.candidates),
            "imagery_quality": self.imagery_quality.value,
            "is_fallback": self.is_fallback,
            "panel_dimensions": {
                "width_m": self.panel_dimensions.width_m,
                "height_m": self.panel_dimensions.height_m,
                "capacity_w": self.panel_dimensions.capacity_w,
            },
            "monthly_bill": (
                {"currency": self.monthly_bill.currency, "amount": self.monthly_bill.amount}
                if self.monthly_bill else None
            ),
        }
