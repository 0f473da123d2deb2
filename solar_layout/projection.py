"""
projection.py — Cost, savings and environmental figures for a panel count.

Every function is pure in (panel_count, total_yearly_energy_kwh) plus the
market constants in config.  All outputs are non-decreasing in panel count
as long as energy is non-decreasing, which a Selection guarantees.

    Grant     = min(size_kW × rate, cap)
    Net cost  = max(cost − grant, 0)
    Payback   = net cost / annual savings
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from solar_layout.config import (
    CO2_KG_PER_CAR,
    CO2_KG_PER_KWH,
    CO2_KG_PER_TREE,
    DEFAULT_PANEL_YEARLY_KWH,
    GRANT_CAP_EUR,
    GRANT_RATE_PER_KW_EUR,
    HOME_VALUE_RATIO,
    PANEL_UNIT_COST_EUR,
    PANEL_UNIT_KW,
    SAVINGS_HORIZON_YEARS,
    SELF_CONSUMPTION_RATIO,
    TARIFF_EUR_PER_KWH,
)
from solar_layout.panel_grid import PanelDimensions


# ── System & cost ────────────────────────────────────────────────────────────

def system_size_kw(panel_count: int) -> float:
    return max(panel_count, 0) * PANEL_UNIT_KW


def estimated_cost(panel_count: int) -> float:
    return max(panel_count, 0) * PANEL_UNIT_COST_EUR


def grant(panel_count: int) -> float:
    return max(0.0, min(system_size_kw(panel_count) * GRANT_RATE_PER_KW_EUR, GRANT_CAP_EUR))


def net_cost(panel_count: int) -> float:
    return max(estimated_cost(panel_count) - grant(panel_count), 0.0)


def home_value_increase(panel_count: int) -> float:
    return estimated_cost(panel_count) * HOME_VALUE_RATIO


# ── Savings ──────────────────────────────────────────────────────────────────

def annual_savings(total_yearly_energy_kwh: float) -> float:
    return max(total_yearly_energy_kwh, 0.0) * TARIFF_EUR_PER_KWH


def monthly_savings(total_yearly_energy_kwh: float) -> float:
    return annual_savings(total_yearly_energy_kwh) / 12


def horizon_savings(total_yearly_energy_kwh: float) -> float:
    return annual_savings(total_yearly_energy_kwh) * SAVINGS_HORIZON_YEARS


def payback_years(panel_count: int, total_yearly_energy_kwh: float) -> float:
    """Years until savings repay the net cost; 0 when nothing is saved."""
    yearly = annual_savings(total_yearly_energy_kwh)
    if yearly <= 0:
        return 0.0
    return net_cost(panel_count) / yearly


# ── Environment ──────────────────────────────────────────────────────────────

def co2_kg(total_yearly_energy_kwh: float) -> float:
    return max(total_yearly_energy_kwh, 0.0) * CO2_KG_PER_KWH


def co2_tonnes(total_yearly_energy_kwh: float) -> float:
    return co2_kg(total_yearly_energy_kwh) / 1000


def trees_equivalent(total_yearly_energy_kwh: float) -> float:
    return co2_kg(total_yearly_energy_kwh) / CO2_KG_PER_TREE


def cars_off_road(total_yearly_energy_kwh: float) -> float:
    return co2_kg(total_yearly_energy_kwh) / CO2_KG_PER_CAR


def estimate_yearly_energy(panel_count: int) -> float:
    """Rule-of-thumb generation when no Selection is at hand."""
    return max(panel_count, 0) * DEFAULT_PANEL_YEARLY_KWH


# ── Roof ─────────────────────────────────────────────────────────────────────

def roof_coverage_percent(
    panel_count: int,
    panel_dimensions: PanelDimensions,
    total_roof_area_m2: float,
) -> float:
    """Share of the roof covered by panels, in percent; 0 for a roof without area."""
    if total_roof_area_m2 <= 0:
        return 0.0
    return max(panel_count, 0) * panel_dimensions.area_m2 / total_roof_area_m2 * 100


# ── Bundle ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Projection:
    panel_count: int
    annual_generation_kwh: float
    system_size_kw: float
    estimated_cost: float
    grant: float
    net_cost: float
    monthly_savings: float
    annual_savings: float
    horizon_savings: float
    payback_years: float
    self_consumed_kwh: float
    exported_kwh: float
    co2_tonnes: float
    co2_tonnes_horizon: float
    trees_equivalent: float
    cars_off_road: float
    home_value_increase: float
    roof_coverage_percent: float

    def as_dict(self) -> dict:
        return {k: (round(v, 2) if isinstance(v, float) else v)
                for k, v in asdict(self).items()}


def project(
    panel_count: int,
    total_yearly_energy_kwh: float | None = None,
    panel_dimensions: PanelDimensions | None = None,
    total_roof_area_m2: float = 0.0,
) -> Projection:
    """
    Full projection for *panel_count* panels producing
    *total_yearly_energy_kwh* (estimated from the count when omitted).

    Roof coverage is 0 unless *total_roof_area_m2* is given; panels default
    to the standard PanelDimensions.
    """
    n = max(int(panel_count), 0)
    energy = estimate_yearly_energy(n) if total_yearly_energy_kwh is None \
        else max(total_yearly_energy_kwh, 0.0)
    return Projection(
        panel_count=n,
        annual_generation_kwh=energy,
        system_size_kw=system_size_kw(n),
        estimated_cost=estimated_cost(n),
        grant=grant(n),
        net_cost=net_cost(n),
        monthly_savings=monthly_savings(energy),
        annual_savings=annual_savings(energy),
        horizon_savings=horizon_savings(energy),
        payback_years=payback_years(n, energy),
        self_consumed_kwh=energy * SELF_CONSUMPTION_RATIO,
        exported_kwh=energy * (1 - SELF_CONSUMPTION_RATIO),
        co2_tonnes=co2_tonnes(energy),
        co2_tonnes_horizon=co2_tonnes(energy) * SAVINGS_HORIZON_YEARS,
        trees_equivalent=trees_equivalent(energy),
        cars_off_road=cars_off_road(energy),
        home_value_increase=home_value_increase(n),
        roof_coverage_percent=roof_coverage_percent(
            n, panel_dimensions or PanelDimensions(), total_roof_area_m2,
        ),
    )


def project_selection(
    selection,
    panel_dimensions: PanelDimensions | None = None,
    total_roof_area_m2: float = 0.0,
) -> Projection:
    return project(
        selection.count, selection.total_yearly_energy_kwh,
        panel_dimensions, total_roof_area_m2,
    )
