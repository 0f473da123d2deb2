"""
errors.py — Exception taxonomy for the layout engine.

    BuildingNotFound  provider has no coverage; recovered by the fallback
    TransportError    network / provider outage; surfaced, caller may retry
    InvalidGeometry   internal invariant violated; a bug, never swallowed
"""

from __future__ import annotations


class SolarLayoutError(Exception):
    """Base class for all engine errors."""


class BuildingNotFound(SolarLayoutError):
    """The imagery provider has no building at the queried coordinate."""

    def __init__(self, latitude: float, longitude: float):
        super().__init__(
            f"BUILDING_NOT_FOUND: no building data at ({latitude:.6f}, {longitude:.6f})"
        )
        self.latitude = latitude
        self.longitude = longitude


class TransportError(SolarLayoutError):
    """Provider infrastructure failure unrelated to coverage."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidGeometry(SolarLayoutError, ValueError):
    """Degenerate bounds, non-positive grid counts and similar bugs."""
