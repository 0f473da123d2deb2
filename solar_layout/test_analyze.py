"""
test_analyze.py — End-to-end report, its validator and the CLI.
"""

from __future__ import annotations

import copy
import dataclasses
import json
from unittest.mock import MagicMock

import pytest
import requests

from solar_layout import analyze
from solar_layout.analyze import analyze_location, build_report, main
from solar_layout.errors import TransportError
from solar_layout.fallback import synthesize_profile
from solar_layout.geometry import Coordinate
from solar_layout.schema import validate_report

DUBLIN = (53.3498, -6.2603)


@pytest.fixture(scope="module")
def report():
    return analyze_location(*DUBLIN, call_api=False)


def test_offline_report_is_valid(report):
    assert report["ok"] is True
    assert validate_report(report) == []


def test_default_selection_is_a_quarter_of_max(report):
    assert report["default_panel_count"] == 6
    assert report["selection"]["requested_count"] == 6
    assert report["selection"]["chosen_count"] == 6
    assert report["projection"]["panel_count"] == 6


def test_requested_panel_count():
    result = analyze_location(*DUBLIN, panels=10, call_api=False)
    assert result["selection"]["chosen_count"] == 10
    assert sum(s["chosen_count"] for s in result["segments"]) == 10
    assert validate_report(result) == []


def test_request_beyond_roof_is_clamped():
    result = analyze_location(*DUBLIN, panels=100, call_api=False)
    assert result["selection"]["requested_count"] == 100
    assert result["selection"]["chosen_count"] == 25
    assert result["projection"]["grant"] == 2400.0


def test_segment_rows(report):
    rows = report["segments"]
    assert len(rows) == 4
    assert [r["candidate_count"] for r in rows] == [9, 6, 6, 4]
    assert rows[0]["quality_class"] == "EXCELLENT"
    assert rows[0]["direction"] == "S"
    assert not any(r["capped"] for r in rows)


def test_report_is_json_serialisable(report):
    assert json.loads(json.dumps(report)) == report


def test_build_report_matches_analyze():
    profile = synthesize_profile(Coordinate(*DUBLIN))
    assert build_report(profile, 10) == analyze_location(*DUBLIN, panels=10, call_api=False)


def test_not_found_uses_fallback():
    session = MagicMock()
    session.get.return_value = MagicMock(status_code=404)
    result = analyze_location(*DUBLIN, api_key="k", session=session)
    assert result["ok"] is True
    assert result["is_fallback"] is True
    assert validate_report(result) == []


def test_transport_failure_is_retryable_error():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("no route to host")
    result = analyze_location(*DUBLIN, api_key="k", session=session)
    assert result["ok"] is False
    assert result["retryable"] is True
    assert "no route to host" in result["error"]
    assert validate_report(result) == []


# ── Validator ─────────────────────────────────────────────────────────────────

def test_validator_catches_missing_keys(report):
    broken = dict(report)
    del broken["selection"]
    assert any("selection" in e for e in validate_report(broken))


def test_validator_catches_candidates_over_max(report):
    broken = copy.deepcopy(report)
    broken["candidate_count"] = broken["max_panels"] + 1
    assert validate_report(broken)


def test_validator_catches_grant_over_cap(report):
    broken = copy.deepcopy(report)
    broken["projection"]["grant"] = 5000.0
    assert any("grant" in e for e in validate_report(broken))


def test_validator_catches_negative_net_cost(report):
    broken = copy.deepcopy(report)
    broken["projection"]["net_cost"] = -1.0
    assert any("net_cost" in e for e in validate_report(broken))


def test_validator_catches_bad_error_result():
    assert validate_report({"ok": False, "error": "", "retryable": "yes"}) != []


# ── CLI ───────────────────────────────────────────────────────────────────────

def test_cli_offline_json(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", [
        "solar-layout", "--lat", "53.3498", "--lng", "-6.2603",
        "--panels", "8", "--offline", "--json",
    ])
    main()
    result = json.loads(capsys.readouterr().out)
    assert result["ok"] is True
    assert result["selection"]["chosen_count"] == 8


def test_cli_offline_summary(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["solar-layout", "--lat", "53.3498", "--lng", "-6.2603",
                                     "--offline"])
    main()
    out = capsys.readouterr().out
    assert "ROOF LAYOUT" in out
    assert "synthesized roof" in out


def test_cli_exits_non_zero_on_outage(monkeypatch, capsys):
    def outage(*args, **kwargs):
        raise TransportError("API Error: 503 - unavailable", 503)

    monkeypatch.setattr(analyze, "fetch_and_process", outage)
    monkeypatch.setattr("sys.argv", ["solar-layout", "--lat", "1.0", "--lng", "2.0"])
    with pytest.raises(SystemExit) as info:
        main()
    assert info.value.code == 1
    assert "ERROR" in capsys.readouterr().out


# ── Roof coverage and segment rows ────────────────────────────────────────────

def test_report_includes_roof_coverage():
    profile = synthesize_profile(Coordinate(*DUBLIN))
    result = build_report(profile, 10)
    expected = 10 * profile.panel_dimensions.area_m2 / profile.total_roof_area_m2 * 100
    assert result["projection"]["roof_coverage_percent"] == pytest.approx(expected, abs=0.01)
    assert "roof_coverage_percent" in analyze_location(*DUBLIN, call_api=False)["projection"]


def test_validator_requires_roof_coverage(report):
    broken = copy.deepcopy(report)
    del broken["projection"]["roof_coverage_percent"]
    assert any("roof_coverage_percent" in e for e in validate_report(broken))


def test_segment_rows_survive_missing_layouts():
    profile = dataclasses.replace(synthesize_profile(Coordinate(*DUBLIN)), layouts=())
    result = build_report(profile, 10)
    rows = result["segments"]
    assert len(rows) == 4
    assert [r["candidate_count"] for r in rows] == [9, 6, 6, 4]
    assert not any(r["capped"] or r["unconstrained"] for r in rows)
    assert sum(r["chosen_count"] for r in rows) == 10
    assert validate_report(result) == []
