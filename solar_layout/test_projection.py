"""
test_projection.py — Quote figures for a panel count.
"""

from __future__ import annotations

from dataclasses import asdict

import pytest

from solar_layout import projection
from solar_layout.fallback import synthesize_profile
from solar_layout.geometry import Coordinate
from solar_layout.panel_grid import PanelDimensions
from solar_layout.projection import (
    grant,
    net_cost,
    payback_years,
    project,
    project_selection,
    roof_coverage_percent,
)
from solar_layout.selection import select_for_profile


def test_known_figures():
    p = project(10, 4000.0)
    assert p.system_size_kw == pytest.approx(4.0)
    assert p.estimated_cost == pytest.approx(8000.0)
    assert p.grant == pytest.approx(2400.0)
    assert p.net_cost == pytest.approx(5600.0)
    assert p.annual_savings == pytest.approx(1120.0)
    assert p.monthly_savings == pytest.approx(1120.0 / 12)
    assert p.horizon_savings == pytest.approx(28000.0)
    assert p.payback_years == pytest.approx(5.0)
    assert p.self_consumed_kwh == pytest.approx(2800.0)
    assert p.exported_kwh == pytest.approx(1200.0)
    assert p.co2_tonnes == pytest.approx(1.18)
    assert p.co2_tonnes_horizon == pytest.approx(29.5)
    assert p.trees_equivalent == pytest.approx(1180.0 / 22)
    assert p.cars_off_road == pytest.approx(1180.0 / 4600)
    assert p.home_value_increase == pytest.approx(6000.0)


def test_zero_panels_is_all_zero():
    p = project(0, 0.0)
    assert p.estimated_cost == 0
    assert p.grant == 0
    assert p.net_cost == 0
    assert p.payback_years == 0
    assert p.annual_savings == 0


def test_negative_count_treated_as_zero():
    assert project(-4, 0.0).panel_count == 0


def test_energy_estimated_when_omitted():
    p = project(5)
    assert p.annual_generation_kwh == pytest.approx(2000.0)


@pytest.mark.parametrize("panels, expected", [(1, 360.0), (6, 2160.0), (7, 2400.0), (40, 2400.0)])
def test_grant_is_capped(panels, expected):
    assert grant(panels) == pytest.approx(expected)


def test_net_cost_never_negative(monkeypatch):
    monkeypatch.setattr(projection, "GRANT_RATE_PER_KW_EUR", 5000.0)
    monkeypatch.setattr(projection, "GRANT_CAP_EUR", 1e9)
    assert net_cost(3) == 0.0
    assert payback_years(3, 1000.0) == 0.0


def test_as_dict_rounds_floats():
    d = project(3, 1000.0 / 3).as_dict()
    assert d["panel_count"] == 3
    assert d["annual_generation_kwh"] == 333.33


@pytest.mark.parametrize("lat, lng", [(53.3498, -6.2603), (40.4168, -3.7038), (-33.86, 151.21)])
def test_every_figure_monotone_over_selection(lat, lng):
    profile = synthesize_profile(Coordinate(lat, lng))
    quotes = [
        asdict(project_selection(select_for_profile(profile, n),
                                 profile.panel_dimensions, profile.total_roof_area_m2))
        for n in range(profile.max_panels + 5)
    ]
    for name in quotes[0]:
        # payback is 0 for an empty system, then non-decreasing
        start = 1 if name == "payback_years" else 0
        values = [q[name] for q in quotes[start:]]
        assert values == sorted(values), name


# ── Roof coverage ─────────────────────────────────────────────────────────────

def test_roof_coverage_percent():
    panel = PanelDimensions(width_m=1.0, height_m=2.0)
    assert roof_coverage_percent(10, panel, 100.0) == pytest.approx(20.0)
    assert roof_coverage_percent(0, panel, 100.0) == 0.0


@pytest.mark.parametrize("roof_area", [0.0, -10.0])
def test_roof_coverage_without_roof_area(roof_area):
    assert roof_coverage_percent(10, PanelDimensions(), roof_area) == 0.0


def test_projection_reports_roof_coverage():
    panel = PanelDimensions(width_m=1.0, height_m=2.0)
    assert project(10, 4000.0, panel, 200.0).roof_coverage_percent == pytest.approx(10.0)
    assert project(10, 4000.0).roof_coverage_percent == 0.0
