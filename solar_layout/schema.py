"""
schema.py — Structure of the report dict handed to UI sinks.

``analyze_location`` returns a plain dict that the quote screen, the lead
form and the webhook forwarder consume as JSON.  This module provides:
    - REPORT_REQUIRED_KEYS / SELECTION_REQUIRED_KEYS / PROJECTION_REQUIRED_KEYS
    - validate_report(): structural + numeric-invariant validator
"""

from __future__ import annotations

from solar_layout.config import GRANT_CAP_EUR

# ── report row ───────────────────────────────────────────────────────────────

REPORT_REQUIRED_KEYS = {
    "ok",                   # bool
    "error",                # str | None
    "building_id",          # str
    "requested",            # [lat, lng] — coordinate the report was computed for
    "max_panels",           # int
    "candidate_count",      # int
    "default_panel_count",  # int
    "imagery_quality",      # "HIGH" | "MEDIUM" | "LOW"
    "is_fallback",          # bool
    "segments",             # list[dict]
    "selection",            # dict
    "projection",           # dict
}

SELECTION_REQUIRED_KEYS = {
    "requested_count",
    "chosen_count",
    "total_yearly_energy_kwh",
    "chosen",
}

PROJECTION_REQUIRED_KEYS = {
    "panel_count",
    "system_size_kw",
    "estimated_cost",
    "grant",
    "net_cost",
    "monthly_savings",
    "annual_savings",
    "horizon_savings",
    "payback_years",
    "co2_tonnes",
    "trees_equivalent",
    "cars_off_road",
    "home_value_increase",
    "roof_coverage_percent",
}

VALID_IMAGERY_QUALITIES = {"HIGH", "MEDIUM", "LOW"}
VALID_QUALITY_CLASSES = {"EXCELLENT", "GOOD", "MODERATE", "LOW"}


# ── Validators ───────────────────────────────────────────────────────────────

def validate_report(result: dict) -> list[str]:
    """
    Validate an ``analyze_location`` result.

    Returns a list of error strings.  Empty list = valid.  Error results
    (``ok`` False) only need ``ok``, ``error`` and ``retryable``.
    """
    errors: list[str] = []

    if result.get("ok") is False:
        if not isinstance(result.get("error"), str) or not result["error"]:
            errors.append("'error' must be a non-empty string when ok is False")
        if not isinstance(result.get("retryable"), bool):
            errors.append("'retryable' must be a bool when ok is False")
        return errors

    for key in REPORT_REQUIRED_KEYS:
        if key not in result:
            errors.append(f"Missing required key: '{key}'")
    if errors:
        return errors  # can't validate further

    if result["imagery_quality"] not in VALID_IMAGERY_QUALITIES:
        errors.append(
            f"'imagery_quality' must be one of {VALID_IMAGERY_QUALITIES}, "
            f"got '{result['imagery_quality']}'"
        )

    if not isinstance(result["max_panels"], int) or result["max_panels"] < 0:
        errors.append("'max_panels' must be a non-negative int")
    elif result["candidate_count"] > result["max_panels"]:
        errors.append(
            f"'candidate_count' ({result['candidate_count']}) exceeds "
            f"'max_panels' ({result['max_panels']})"
        )

    if not isinstance(result["segments"], list):
        errors.append("'segments' must be a list")
    else:
        if result["segments"] and result["candidate_count"] == 0:
            errors.append("'candidate_count' is 0 but 'segments' is non-empty")
        for i, seg in enumerate(result["segments"]):
            if seg.get("quality_class") not in VALID_QUALITY_CLASSES:
                errors.append(f"segments[{i}]: invalid quality_class {seg.get('quality_class')!r}")

    errors.extend(validate_selection(result["selection"], result["candidate_count"]))
    errors.extend(validate_projection(result["projection"]))
    return errors


def validate_selection(selection: dict, candidate_count: int) -> list[str]:
    errors: list[str] = []
    for key in SELECTION_REQUIRED_KEYS:
        if key not in selection:
            errors.append(f"selection: missing required key '{key}'")
    if errors:
        return errors

    if selection["chosen_count"] != len(selection["chosen"]):
        errors.append("selection: 'chosen_count' does not match len('chosen')")
    if selection["chosen_count"] > candidate_count:
        errors.append("selection: more panels chosen than candidates exist")
    if selection["total_yearly_energy_kwh"] < 0:
        errors.append("selection: 'total_yearly_energy_kwh' is negative")
    return errors


def validate_projection(projection: dict) -> list[str]:
    errors: list[str] = []
    for key in PROJECTION_REQUIRED_KEYS:
        if key not in projection:
            errors.append(f"projection: missing required key '{key}'")
    if errors:
        return errors

    if projection["grant"] > GRANT_CAP_EUR:
        errors.append(f"projection: grant {projection['grant']} exceeds cap {GRANT_CAP_EUR}")
    if projection["net_cost"] < 0:
        errors.append("projection: 'net_cost' is negative")
    if projection["roof_coverage_percent"] < 0:
        errors.append("projection: 'roof_coverage_percent' is negative")
    for key in PROJECTION_REQUIRED_KEYS - {"panel_count"}:
        if not isinstance(projection[key], (int, float)):
            errors.append(f"projection: '{key}' must be numeric")
    return errors
