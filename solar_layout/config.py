"""
config.py — Shared constants and defaults for the roof layout engine.
"""

import os

__version__ = "1.0.0"

# ── Google Solar API (buildingInsights) ──────────────────────────────────────

BUILDING_INSIGHTS_URL = "https://solar.googleapis.com/v1/buildingInsights:findClosest"
API_KEY_ENV_VARS = ("GOOGLE_SOLAR_API_KEY", "NEXT_PUBLIC_GOOGLE_SOLAR_API_KEY")
DEFAULT_REQUIRED_QUALITY = "HIGH"
PROVIDER_TIMEOUT_SEC = 30


def get_api_key() -> str:
    """First non-empty key from the environment, or ''."""
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return ""


# ── Geometry ─────────────────────────────────────────────────────────────────

METERS_PER_DEGREE_LAT = 111_320.0   # approximation, not geodesic
MIN_BOUNDS_EPSILON_DEG = 1e-7       # ~1 cm; keeps ne strictly above sw

# ── Panel assumptions ────────────────────────────────────────────────────────

PANEL_WIDTH_M = 1.045
PANEL_HEIGHT_M = 1.879
PANEL_CAPACITY_W = 400.0
PANEL_GAP_M = 0.3                   # walkway between neighbouring panels
PERFORMANCE_RATIO = 0.85            # inverter, wiring, soiling losses
ENERGY_JITTER_FRACTION = 0.05       # ±5 % per candidate

# ── Roof quality classes (mean sunshine hours / year) ────────────────────────

EXCELLENT_MIN_HOURS = 1200.0
GOOD_MIN_HOURS = 1000.0
MODERATE_MIN_HOURS = 800.0

# ── Panel dot colour bands (kWh / panel / year) ──────────────────────────────

RED_MIN_KWH = 1200.0
ORANGE_MIN_KWH = 1100.0
GREEN_MIN_KWH = 1000.0

# ── Market constants (Ireland, EUR) ──────────────────────────────────────────

PANEL_UNIT_KW = 0.4
PANEL_UNIT_COST_EUR = 800.0
GRANT_RATE_PER_KW_EUR = 900.0
GRANT_CAP_EUR = 2400.0
TARIFF_EUR_PER_KWH = 0.28
SAVINGS_HORIZON_YEARS = 25
SELF_CONSUMPTION_RATIO = 0.7
DEFAULT_PANEL_YEARLY_KWH = 400.0

# ── Environmental equivalents ────────────────────────────────────────────────

CO2_KG_PER_KWH = 0.295              # Irish grid average
CO2_KG_PER_TREE = 22.0              # absorbed per tree per year
CO2_KG_PER_CAR = 4600.0             # emitted per car per year
HOME_VALUE_RATIO = 0.75             # of system cost

# ── Fallback building ────────────────────────────────────────────────────────

FALLBACK_MAX_PANELS = 25
FALLBACK_CURRENCY = "EUR"
FALLBACK_MONTHLY_BILL = 150.0

# ── UI seed ──────────────────────────────────────────────────────────────────

DEFAULT_PANEL_FRACTION = 0.25
