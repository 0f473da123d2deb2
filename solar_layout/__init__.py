"""
solar_layout — Roof solar potential & panel layout engine.

Turns a latitude/longitude into a deterministic set of candidate panel
positions per roof segment, using Google Solar API building insights when
the location is covered and a synthesized four-face roof when it is not.

  - Roof segments normalised from the provider payload (or synthesized)
  - Grid-based candidate panels per segment with seeded energy jitter
  - Top-N panel selection for a requested panel count
  - Cost, grant, savings and CO₂ projections for the selection

    from solar_layout import Coordinate, fetch_and_process, select, project
    profile = fetch_and_process(Coordinate(53.3498, -6.2603))
"""

from solar_layout.building_insights import default_panel_count, fetch_and_process
from solar_layout.config import __version__
from solar_layout.geometry import Coordinate
from solar_layout.projection import project
from solar_layout.selection import select

__all__ = [
    "__version__",
    "Coordinate",
    "default_panel_count",
    "fetch_and_process",
    "project",
    "select",
]
