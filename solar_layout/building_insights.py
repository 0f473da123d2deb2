"""
building_insights.py — Google Solar API client and the orchestrator.

    coordinate ──▶ fetch_building_insights ──▶ ProviderResponse
                                                 ├─ FOUND             → build_profile
                                                 ├─ NOT_FOUND         → fallback.synthesize_profile
                                                 └─ TRANSPORT_FAILURE → raise TransportError

The client never raises for HTTP or network trouble; it tags the response
instead, and the orchestrator decides what each outcome means.  A missing
building is recovered locally, an outage is not: substituting fake data
for an outage would hide it from the user.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

import requests

from solar_layout.config import (
    BUILDING_INSIGHTS_URL,
    DEFAULT_PANEL_FRACTION,
    DEFAULT_REQUIRED_QUALITY,
    PANEL_CAPACITY_W,
    PANEL_HEIGHT_M,
    PANEL_WIDTH_M,
    PROVIDER_TIMEOUT_SEC,
    get_api_key,
)
from solar_layout.errors import BuildingNotFound, InvalidGeometry, TransportError
from solar_layout.fallback import synthesize_profile
from solar_layout.geometry import Coordinate
from solar_layout.panel_grid import (
    PanelDimensions,
    allocate_panel_targets,
    apportion,
    generate_candidates,
)
from solar_layout.profile import BuildingProfile, ImageryQuality, MonthlyBill
from solar_layout.roof_segments import RoofSegment, parse_roof_segments

log = logging.getLogger(__name__)


# ── Provider response (tagged union) ─────────────────────────────────────────

class ProviderStatus(str, Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"


@dataclass(frozen=True)
class ProviderResponse:
    status: ProviderStatus
    coordinate: Coordinate
    payload: dict | None = None
    error: str | None = None
    status_code: int | None = None

    @classmethod
    def found(cls, coordinate: Coordinate, payload: dict) -> ProviderResponse:
        return cls(ProviderStatus.FOUND, coordinate, payload=payload, status_code=200)

    @classmethod
    def not_found(cls, coordinate: Coordinate) -> ProviderResponse:
        return cls(ProviderStatus.NOT_FOUND, coordinate, status_code=404,
                   error="BUILDING_NOT_FOUND")

    @classmethod
    def failure(cls, coordinate: Coordinate, error: str,
                status_code: int | None = None) -> ProviderResponse:
        return cls(ProviderStatus.TRANSPORT_FAILURE, coordinate,
                   error=error, status_code=status_code)


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return "Unknown error"


def fetch_building_insights(
    coordinate: Coordinate,
    quality: str = DEFAULT_REQUIRED_QUALITY,
    *,
    api_key: str | None = None,
    session=None,
    timeout: float = PROVIDER_TIMEOUT_SEC,
) -> ProviderResponse:
    """
    Query ``buildingInsights:findClosest`` for *coordinate*.

    Parameters
    ----------
    coordinate : point to look up
    quality    : minimum imagery quality, HIGH | MEDIUM | LOW
    api_key    : overrides the GOOGLE_SOLAR_API_KEY environment variable
    session    : anything with a requests-style ``get`` (a Session, a mock)
    timeout    : seconds

    Returns
    -------
    ProviderResponse — FOUND with the JSON payload, NOT_FOUND on HTTP 404,
    TRANSPORT_FAILURE on any other error.
    """
    key = api_key if api_key is not None else get_api_key()
    if not key:
        log.warning("Google Solar API key not found in environment variables")

    params = {
        "location.latitude": f"{coordinate.latitude:.6f}",
        "location.longitude": f"{coordinate.longitude:.6f}",
        "requiredQuality": quality,
        "key": key,
    }
    http = session or requests

    log.info("Fetching building insights: (%.6f, %.6f)",
             coordinate.latitude, coordinate.longitude)
    try:
        response = http.get(BUILDING_INSIGHTS_URL, params=params, timeout=timeout)
    except requests.RequestException as exc:
        log.error("  Building insights request failed: %s", exc)
        return ProviderResponse.failure(coordinate, str(exc))

    if response.status_code == 404:
        log.info("  No building at this location (404)")
        return ProviderResponse.not_found(coordinate)

    if response.status_code != 200:
        message = f"API Error: {response.status_code} - {_error_message(response)}"
        log.error("  %s", message)
        return ProviderResponse.failure(coordinate, message, response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        log.error("  Could not decode building insights response: %s", exc)
        return ProviderResponse.failure(coordinate, f"Invalid JSON: {exc}", 200)

    return ProviderResponse.found(coordinate, payload)


# ── Payload → BuildingProfile ────────────────────────────────────────────────

def _panel_dimensions(solar_potential: dict) -> PanelDimensions:
    return PanelDimensions(
        width_m=float(solar_potential.get("panelWidthMeters") or PANEL_WIDTH_M),
        height_m=float(solar_potential.get("panelHeightMeters") or PANEL_HEIGHT_M),
        capacity_w=float(solar_potential.get("panelCapacityWatts") or PANEL_CAPACITY_W),
    )


def _monthly_bill(solar_potential: dict) -> MonthlyBill | None:
    for analysis in solar_potential.get("financialAnalyses") or []:
        bill = analysis.get("monthlyBill")
        if bill:
            return MonthlyBill(bill.get("currencyCode", ""), float(bill.get("units", 0)))
    return None


def panel_targets(
    solar_potential: dict,
    segments: list[RoofSegment],
    max_panels: int,
) -> list[int]:
    """
    Per-segment panel targets.

    Taken from the roofSegmentSummaries of the largest panel configuration
    when the provider sends one, else *max_panels* split by roof area.  The
    total never exceeds *max_panels*.
    """
    configs = solar_potential.get("solarPanelConfigs") or []
    if configs:
        largest = max(configs, key=lambda c: c.get("panelsCount", 0))
        counts = [0] * len(segments)
        for summary in largest.get("roofSegmentSummaries") or []:
            idx = summary.get("segmentIndex", 0)
            if 0 <= idx < len(segments):
                counts[idx] += int(summary.get("panelsCount", 0))
        if sum(counts) > 0:
            if sum(counts) > max_panels:
                counts = apportion([float(c) for c in counts], max_panels)
            return counts
    return allocate_panel_targets(segments, max_panels)


def build_profile(coordinate: Coordinate, payload: dict) -> BuildingProfile:
    """
    Normalise a FOUND payload into a BuildingProfile.

    Raises TransportError if the payload lacks the roof data the engine
    needs; InvalidGeometry propagates unchanged.
    """
    try:
        solar_potential = payload["solarPotential"]
        segments = parse_roof_segments(solar_potential)
        declared_max = int(solar_potential.get("maxArrayPanelsCount") or 0)
        center_raw = payload.get("center") or {}
        center = Coordinate(
            float(center_raw.get("latitude", coordinate.latitude)),
            float(center_raw.get("longitude", coordinate.longitude)),
        )
        whole_roof = (solar_potential.get("wholeRoofStats") or {}).get("areaMeters2")
        panel = _panel_dimensions(solar_potential)
        bill = _monthly_bill(solar_potential)
    except InvalidGeometry:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise TransportError(f"Malformed building insights payload: {exc!r}") from exc

    if not segments:
        raise TransportError("Building insights payload has no roof segments")

    if declared_max > 0:
        targets = panel_targets(solar_potential, segments, declared_max)
    else:
        # Undeclared ceiling: one panel per footprint of roof, capped by what fits
        footprint = panel.width_m * panel.height_m
        targets = [int(s.area_m2 // footprint) for s in segments]
    layouts, candidates = generate_candidates(segments, targets, coordinate, panel)
    max_panels = declared_max if declared_max > 0 else len(candidates)

    total_roof = float(whole_roof) if whole_roof else sum(s.area_m2 for s in segments)

    return BuildingProfile(
        building_id=str(payload.get("name", "")),
        requested=coordinate,
        center=center,
        total_roof_area_m2=total_roof,
        max_panels=max_panels,
        imagery_quality=ImageryQuality.parse(payload.get("imageryQuality")),
        segments=tuple(segments),
        candidates=tuple(candidates),
        layouts=tuple(layouts),
        panel_dimensions=panel,
        monthly_bill=bill,
    )


# ── Orchestrator ─────────────────────────────────────────────────────────────

def resolve(response: ProviderResponse) -> BuildingProfile:
    """Turn a provider response into a profile, or raise."""
    if response.status is ProviderStatus.FOUND:
        return build_profile(response.coordinate, response.payload or {})
    if response.status is ProviderStatus.NOT_FOUND:
        return recover_not_found(
            BuildingNotFound(response.coordinate.latitude, response.coordinate.longitude)
        )
    raise TransportError(response.error or "Building insights request failed",
                         response.status_code)


def recover_not_found(exc: BuildingNotFound) -> BuildingProfile:
    log.info("  %s — using synthesized roof", exc)
    return synthesize_profile(Coordinate(exc.latitude, exc.longitude))


def fetch_and_process(
    coordinate: Coordinate,
    quality: str = DEFAULT_REQUIRED_QUALITY,
    *,
    api_key: str | None = None,
    session=None,
) -> BuildingProfile:
    """
    Look up *coordinate* and return its BuildingProfile.

    Locations without coverage get a synthesized roof.  Network or provider
    failures raise TransportError so the caller can offer a retry.  The
    returned profile's ``requested`` field equals *coordinate*; callers
    issuing overlapping lookups should keep only the profile matching
    their latest coordinate.
    """
    response = fetch_building_insights(
        coordinate, quality, api_key=api_key, session=session,
    )
    profile = resolve(response)
    log.info("  Profile %s: %d segment(s), %d candidate(s), max %d panel(s)",
             profile.building_id, len(profile.segments),
             len(profile.candidates), profile.max_panels)
    return profile


def default_panel_count(profile: BuildingProfile) -> int:
    """Initial slider value: 25 % of max_panels, rounded half-up."""
    return int(math.floor(profile.max_panels * DEFAULT_PANEL_FRACTION + 0.5))
