"""
panel_grid.py — Candidate panel positions per roof segment.

Algorithm (per segment):
    1. panels_per_row = ceil(sqrt(n)), rows = ceil(n / panels_per_row)
    2. lat / lng spacing = range / (cells + 1) over the segment box
    3. candidate i sits at sw + ((i // per_row) + 1, (i % per_row) + 1) spacings
    4. yearly energy = segment base yield × U(1 - J, 1 + J) jitter

If the requested count leaves less than one panel footprint (plus gap)
between grid lines, the count is reduced until it fits.  The reduction is
reported on the returned SegmentLayout.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from solar_layout.config import (
    ENERGY_JITTER_FRACTION,
    GREEN_MIN_KWH,
    ORANGE_MIN_KWH,
    PANEL_CAPACITY_W,
    PANEL_GAP_M,
    PANEL_HEIGHT_M,
    PANEL_WIDTH_M,
    PERFORMANCE_RATIO,
    RED_MIN_KWH,
)
from solar_layout.geometry import (
    Coordinate,
    grid_spacing,
    lat_to_meters,
    lng_to_meters,
)
from solar_layout.roof_segments import QualityClass, RoofSegment

log = logging.getLogger(__name__)

# Yield derating per quality class, on top of the sunshine figure itself
CLASS_YIELD_FACTORS = {
    QualityClass.EXCELLENT: 1.0,
    QualityClass.GOOD: 0.95,
    QualityClass.MODERATE: 0.85,
    QualityClass.LOW: 0.70,
}


class Orientation(str, Enum):
    LANDSCAPE = "LANDSCAPE"
    PORTRAIT = "PORTRAIT"


@dataclass(frozen=True)
class PanelDimensions:
    width_m: float = PANEL_WIDTH_M
    height_m: float = PANEL_HEIGHT_M
    capacity_w: float = PANEL_CAPACITY_W

    @property
    def capacity_kw(self) -> float:
        return self.capacity_w / 1000.0

    @property
    def area_m2(self) -> float:
        return self.width_m * self.height_m

    def footprint_m(self, orientation: Orientation) -> tuple[float, float]:
        """(north-south, east-west) extent in metres; landscape lies long side east-west."""
        short, long_ = sorted((self.width_m, self.height_m))
        if orientation is Orientation.LANDSCAPE:
            return short, long_
        return long_, short


@dataclass(frozen=True)
class PanelCandidate:
    center: Coordinate
    orientation: Orientation
    segment_index: int
    yearly_energy_kwh: float

    def as_dict(self) -> dict:
        return {
            "center": [self.center.latitude, self.center.longitude],
            "orientation": self.orientation.value,
            "segment_index": self.segment_index,
            "yearly_energy_kwh": round(self.yearly_energy_kwh, 1),
            "band": energy_band(self.yearly_energy_kwh),
        }


@dataclass(frozen=True)
class SegmentLayout:
    """
    Grid produced for one segment, with the cap applied (if any).

    ``unconstrained`` marks the single forced candidate placed when no
    panel fits anywhere on the roof: it lies strictly inside the segment
    but is not inset by half a panel footprint.
    """
    segment_index: int
    requested_count: int
    rows: int
    columns: int
    orientation: Orientation
    candidates: tuple[PanelCandidate, ...] = field(default=())
    unconstrained: bool = False

    @property
    def placed_count(self) -> int:
        return len(self.candidates)

    @property
    def capped(self) -> bool:
        return self.placed_count < self.requested_count


def energy_band(yearly_energy_kwh: float) -> str:
    """Colour band used for panel dots on the map."""
    if yearly_energy_kwh >= RED_MIN_KWH:
        return "RED"
    if yearly_energy_kwh >= ORANGE_MIN_KWH:
        return "ORANGE"
    if yearly_energy_kwh >= GREEN_MIN_KWH:
        return "GREEN"
    return "BLUE"


def base_yield(segment: RoofSegment, panel: PanelDimensions = PanelDimensions()) -> float:
    """Expected kWh/yr for one panel on *segment* before jitter."""
    return (
        panel.capacity_kw
        * segment.mean_sunshine_hours
        * PERFORMANCE_RATIO
        * CLASS_YIELD_FACTORS[segment.quality_class]
    )


def choose_orientation(segment: RoofSegment) -> Orientation:
    lat = segment.center.latitude
    width_m = lng_to_meters(segment.bounds.lng_range, lat)
    height_m = lat_to_meters(segment.bounds.lat_range)
    return Orientation.LANDSCAPE if width_m >= height_m else Orientation.PORTRAIT


def grid_shape(count: int) -> tuple[int, int]:
    """(rows, panels_per_row) for *count* panels; (0, 0) when empty."""
    if count <= 0:
        return 0, 0
    per_row = math.ceil(math.sqrt(count))
    return math.ceil(count / per_row), per_row


def _fits(segment: RoofSegment, count: int, footprint: tuple[float, float]) -> bool:
    rows, cols = grid_shape(count)
    lat_step = grid_spacing(segment.bounds.lat_range, rows)
    lng_step = grid_spacing(segment.bounds.lng_range, cols)
    if lat_step <= 0 or lng_step <= 0:
        return False
    need_ns, need_ew = footprint
    return (
        lat_to_meters(lat_step) >= need_ns + PANEL_GAP_M
        and lng_to_meters(lng_step, segment.center.latitude) >= need_ew + PANEL_GAP_M
    )


def max_fitting_count(
    segment: RoofSegment,
    target_count: int,
    panel: PanelDimensions = PanelDimensions(),
    orientation: Orientation | None = None,
) -> int:
    """Largest count ≤ *target_count* whose grid leaves room for every panel."""
    footprint = panel.footprint_m(orientation or choose_orientation(segment))
    count = max(target_count, 0)
    while count > 0 and not _fits(segment, count, footprint):
        count -= 1
    return count


def segment_seed(anchor: Coordinate, segment_index: int) -> np.random.SeedSequence:
    """Deterministic jitter seed for one segment of the building at *anchor*."""
    lat_key = int(round((anchor.latitude + 90.0) * 1e6))
    lng_key = int(round((anchor.longitude + 180.0) * 1e6))
    return np.random.SeedSequence([lat_key, lng_key, segment_index])


def generate_segment_layout(
    segment: RoofSegment,
    target_count: int,
    panel: PanelDimensions = PanelDimensions(),
    rng: np.random.Generator | None = None,
    *,
    require_fit: bool = True,
) -> SegmentLayout:
    """
    Lay out up to *target_count* candidates inside *segment*.

    ``target_count == 0`` gives an empty layout.  With *require_fit* the
    count is capped so neighbouring panels never overlap; without it only
    strict interior placement is guaranteed.
    """
    orientation = choose_orientation(segment)
    count = max(target_count, 0)
    if require_fit:
        count = max_fitting_count(segment, count, panel, orientation)
    if count < target_count:
        log.warning("  Segment %d: %d panel(s) requested, %d fit",
                    segment.index, target_count, count)

    rows, per_row = grid_shape(count)
    if count == 0:
        return SegmentLayout(segment.index, target_count, 0, 0, orientation)

    lat_step = grid_spacing(segment.bounds.lat_range, rows)
    lng_step = grid_spacing(segment.bounds.lng_range, per_row)

    i = np.arange(count)
    lats = segment.bounds.sw.latitude + (i // per_row + 1) * lat_step
    lngs = segment.bounds.sw.longitude + (i % per_row + 1) * lng_step

    if rng is None:
        rng = np.random.default_rng(segment_seed(segment.center, segment.index))
    jitter = rng.uniform(1.0 - ENERGY_JITTER_FRACTION, 1.0 + ENERGY_JITTER_FRACTION, count)
    energies = base_yield(segment, panel) * jitter

    candidates = tuple(
        PanelCandidate(
            center=Coordinate(float(lat), float(lng)),
            orientation=orientation,
            segment_index=segment.index,
            yearly_energy_kwh=float(kwh),
        )
        for lat, lng, kwh in zip(lats, lngs, energies)
    )
    return SegmentLayout(
        segment.index, target_count, rows, per_row, orientation, candidates,
        unconstrained=not require_fit,
    )


# ── Whole-building allocation ────────────────────────────────────────────────

def apportion(weights: list[float], total: int) -> list[int]:
    """
    Split *total* into integers proportional to *weights* (largest remainder).

    Ties in the remainder go to the lower index.  Non-positive weights get 0.
    """
    clean = [w if w > 0 else 0.0 for w in weights]
    weight_sum = sum(clean)
    if total <= 0 or weight_sum <= 0:
        return [0] * len(weights)

    exact = [total * w / weight_sum for w in clean]
    counts = [math.floor(x) for x in exact]
    leftover = total - sum(counts)
    order = sorted(range(len(exact)), key=lambda k: (-(exact[k] - counts[k]), k))
    for k in order[:leftover]:
        counts[k] += 1
    return counts


def allocate_panel_targets(segments: list[RoofSegment], max_panels: int) -> list[int]:
    """Distribute *max_panels* across *segments* by roof area."""
    return apportion([s.area_m2 for s in segments], max_panels)


def generate_candidates(
    segments: list[RoofSegment],
    targets: list[int],
    anchor: Coordinate,
    panel: PanelDimensions = PanelDimensions(),
) -> tuple[list[SegmentLayout], list[PanelCandidate]]:
    """
    Generate every segment's grid; candidates come out ordered by segment.

    Jitter for each segment is seeded from *anchor* and the segment index,
    so the same building always yields the same candidates.  When nothing
    fits anywhere a single unconstrained candidate is placed on the largest
    segment, keeping the candidate list non-empty.
    """
    layouts = [
        generate_segment_layout(
            seg, target, panel, np.random.default_rng(segment_seed(anchor, seg.index)),
        )
        for seg, target in zip(segments, targets)
    ]

    if segments and not any(layout.candidates for layout in layouts):
        k = max(range(len(segments)), key=lambda j: segments[j].area_m2)
        log.warning("  No panel fits any segment; placing one on segment %d", k)
        layouts[k] = generate_segment_layout(
            segments[k], 1, panel,
            np.random.default_rng(segment_seed(anchor, segments[k].index)),
            require_fit=False,
        )

    candidates = [c for layout in layouts for c in layout.candidates]
    log.info("  Generated %d candidate panel(s) across %d segment(s)",
             len(candidates), len(segments))
    return layouts, candidates
