"""
analyze.py — One function.  One coordinate in.  Full layout report out.

    from solar_layout.analyze import analyze_location
    result = analyze_location(53.3498, -6.2603, panels=10)
    print(result["projection"]["net_cost"])      # e.g. 5600.0
    print(result["selection"]["chosen_count"])   # 10

Also runnable from the command line:
    python -m solar_layout.analyze --lat 53.3498 --lng -6.2603 --panels 10
    python -m solar_layout.analyze --lat 53.3498 --lng -6.2603 --offline --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from solar_layout.building_insights import default_panel_count, fetch_and_process
from solar_layout.errors import TransportError
from solar_layout.fallback import synthesize_profile
from solar_layout.geometry import Coordinate
from solar_layout.profile import BuildingProfile
from solar_layout.projection import project_selection
from solar_layout.selection import select_for_profile

log = logging.getLogger(__name__)


def analyze_location(
    lat: float,
    lng: float,
    *,
    panels: int | None = None,
    call_api: bool = True,
    api_key: str | None = None,
    session=None,
) -> dict:
    """
    Build the roof layout for (lat, lng) and project *panels* panels on it.

    What happens inside
    -------------------
    1. Looks the coordinate up in the Google Solar API
    2. Falls back to a synthesized roof when the building is not covered
    3. Lays out candidate panels on every roof segment
    4. Picks the best *panels* candidates (default: 25 % of max)
    5. Projects cost, grant, savings and CO₂ for that selection

    Parameters
    ----------
    lat, lng : float
        Coordinate of the building, decimal degrees.

    panels : int, optional
        Requested panel count.  Clamped to what the roof holds.

    call_api : bool, default True
        Set to False to skip the provider and use the synthesized roof
        (useful offline).

    Returns
    -------
    dict with ``ok`` True and the keys listed in schema.REPORT_REQUIRED_KEYS,
    or ``{"ok": False, "error": str, "retryable": True}`` when the provider
    could not be reached.
    """
    coordinate = Coordinate(lat, lng)

    if call_api:
        try:
            profile = fetch_and_process(coordinate, api_key=api_key, session=session)
        except TransportError as exc:
            return _error(f"Building insights unavailable: {exc}", retryable=True)
    else:
        profile = synthesize_profile(coordinate)

    return build_report(profile, panels)


def build_report(profile: BuildingProfile, panels: int | None = None) -> dict:
    """
    Report dict for an existing *profile*; no provider call.

    Cheap enough to run on every panel-slider tick.
    """
    seed = default_panel_count(profile)
    requested = seed if panels is None else panels
    selection = select_for_profile(profile, requested)
    projection = project_selection(
        selection, profile.panel_dimensions, profile.total_roof_area_m2,
    )

    per_segment = selection.per_segment()
    candidate_counts: dict[int, int] = {}
    for c in profile.candidates:
        candidate_counts[c.segment_index] = candidate_counts.get(c.segment_index, 0) + 1
    layouts = {layout.segment_index: layout for layout in profile.layouts}

    segments = []
    for seg in profile.segments:
        layout = layouts.get(seg.index)
        row = seg.as_dict()
        row["candidate_count"] = candidate_counts.get(seg.index, 0)
        row["capped"] = layout.capped if layout else False
        row["unconstrained"] = layout.unconstrained if layout else False
        row["chosen_count"] = per_segment.get(seg.index, 0)
        segments.append(row)

    return {
        "ok": True,
        "error": None,
        **profile.summary(),
        "default_panel_count": seed,
        "segments": segments,
        "selection": {
            "requested_count": requested,
            "chosen_count": selection.count,
            "total_yearly_energy_kwh": round(selection.total_yearly_energy_kwh, 2),
            "chosen": [c.as_dict() for c in selection.chosen],
        },
        "projection": projection.as_dict(),
    }


# ── Helpers ───────────────────────────────────────────────────────────────────

def _error(msg: str, *, retryable: bool) -> dict:
    """Return a minimal error result."""
    log.error(msg)
    return {"ok": False, "error": msg, "retryable": retryable}


def print_report(result: dict) -> None:
    """Pretty-print an analysis result to the terminal."""
    if not result.get("ok"):
        retry = "  (temporary — try again)" if result.get("retryable") else ""
        print(f"\n  ERROR: {result.get('error')}{retry}\n")
        return

    lat, lng = result["requested"]
    print()
    print("=" * 60)
    print(f"  ROOF LAYOUT — {result['building_id']}")
    print("=" * 60)

    print(f"\n  LOCATION    {lat:.6f}, {lng:.6f}")
    print(f"  IMAGERY     {result['imagery_quality']}"
          f"{'  (synthesized roof)' if result['is_fallback'] else ''}")
    print(f"  ROOF AREA   {result['total_roof_area_m2']:,.1f} m²")
    print(f"  PANELS      {result['candidate_count']} candidates, max {result['max_panels']}")

    print(f"\n  ── Roof Segments ───────────────────────────")
    for s in result["segments"]:
        print(f"     #{s['index']:<2d} {s['quality_class']:<9s} "
              f"{s['direction']:<2s} {s['azimuth_degrees']:>5.1f}°  "
              f"Pitch {s['pitch_degrees']:>4.1f}°  "
              f"Area {s['area_m2']:>6.1f} m²  "
              f"Panels {s['chosen_count']:>2d}/{s['candidate_count']:<2d}")

    sel = result["selection"]
    p = result["projection"]
    print(f"\n  ── Selection ───────────────────────────────")
    print(f"     Requested panels ........ {sel['requested_count']:>10d}")
    print(f"     Installed panels ........ {sel['chosen_count']:>10d}")
    print(f"     Annual generation ....... {sel['total_yearly_energy_kwh']:>10,.0f} kWh/yr")

    print(f"\n  ── Investment ──────────────────────────────")
    print(f"     System size ............. {p['system_size_kw']:>10,.1f} kW")
    print(f"     Roof coverage ........... {p['roof_coverage_percent']:>10.1f} %")
    print(f"     Estimated cost .......... €{p['estimated_cost']:>9,.0f}")
    print(f"     SEAI grant .............. €{p['grant']:>9,.0f}")
    print(f"     Net cost ................ €{p['net_cost']:>9,.0f}")
    print(f"     Monthly savings ......... €{p['monthly_savings']:>9,.0f}")
    print(f"     Annual savings .......... €{p['annual_savings']:>9,.0f}")
    print(f"     25-year savings ......... €{p['horizon_savings']:>9,.0f}")
    print(f"     Payback ................. {p['payback_years']:>10.1f} years")

    print(f"\n  ── Environment ─────────────────────────────")
    print(f"     CO₂ saved ............... {p['co2_tonnes']:>10.1f} t/yr")
    print(f"     Trees equivalent ........ {round(p['trees_equivalent']):>10d}")
    print(f"     Cars off road ........... {round(p['cars_off_road']):>10d}")
    print(f"     Home value increase ..... €{p['home_value_increase']:>9,.0f}")
    print()


# ── CLI entry point ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solar_layout",
        description="Roof solar potential, panel layout and savings projection.",
    )
    parser.add_argument("--lat", type=float, required=True, help="Building latitude.")
    parser.add_argument("--lng", type=float, required=True, help="Building longitude.")
    parser.add_argument(
        "--panels",
        type=int,
        default=None,
        help="Requested panel count (default: 25%% of the roof maximum).",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the Google Solar API and use the synthesized roof.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw report as JSON instead of the summary.",
    )
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s %(message)s")

    args = build_parser().parse_args()
    result = analyze_location(
        args.lat, args.lng, panels=args.panels, call_api=not args.offline,
    )

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print_report(result)

    if not result["ok"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
