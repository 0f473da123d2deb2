"""
geometry.py — Latitude/longitude primitives.

All roof geometry is expressed as small deltas around the queried point,
so a flat-earth approximation is used throughout: one degree of latitude
is METERS_PER_DEGREE_LAT metres, one degree of longitude that figure
scaled by cos(latitude).  Good to well under 1 % over a single roof.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from solar_layout.config import METERS_PER_DEGREE_LAT, MIN_BOUNDS_EPSILON_DEG
from solar_layout.errors import InvalidGeometry


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point in decimal degrees."""
    latitude: float
    longitude: float

    def offset(self, north_m: float, east_m: float) -> Coordinate:
        """Point displaced by *north_m* / *east_m* metres."""
        return Coordinate(
            self.latitude + meters_to_lat(north_m),
            self.longitude + meters_to_lng(east_m, self.latitude),
        )


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box; ``ne`` is strictly north-east of ``sw``."""
    ne: Coordinate
    sw: Coordinate

    def __post_init__(self):
        if not (self.ne.latitude > self.sw.latitude
                and self.ne.longitude > self.sw.longitude):
            raise InvalidGeometry(
                f"Degenerate bounds: ne={self.ne} is not north-east of sw={self.sw}"
            )

    @property
    def lat_range(self) -> float:
        return self.ne.latitude - self.sw.latitude

    @property
    def lng_range(self) -> float:
        return self.ne.longitude - self.sw.longitude

    def contains(self, point: Coordinate, margin_lat: float = 0.0,
                 margin_lng: float = 0.0) -> bool:
        """True if *point* is strictly inside the box shrunk by the margins."""
        return (
            self.sw.latitude + margin_lat < point.latitude < self.ne.latitude - margin_lat
            and self.sw.longitude + margin_lng < point.longitude < self.ne.longitude - margin_lng
        )

    def overlaps(self, other: Bounds) -> bool:
        return not (
            self.ne.latitude <= other.sw.latitude
            or other.ne.latitude <= self.sw.latitude
            or self.ne.longitude <= other.sw.longitude
            or other.ne.longitude <= self.sw.longitude
        )


# ── Unit conversion ──────────────────────────────────────────────────────────

def meters_to_lat(meters: float) -> float:
    return meters / METERS_PER_DEGREE_LAT


def meters_to_lng(meters: float, latitude: float) -> float:
    return meters / (METERS_PER_DEGREE_LAT * math.cos(math.radians(latitude)))


def lat_to_meters(degrees: float) -> float:
    return degrees * METERS_PER_DEGREE_LAT


def lng_to_meters(degrees: float, latitude: float) -> float:
    return degrees * METERS_PER_DEGREE_LAT * math.cos(math.radians(latitude))


# ── Primitives ───────────────────────────────────────────────────────────────

def bounds_of(
    center_lat: float,
    center_lng: float,
    half_width_deg: float,
    half_height_deg: float,
) -> Bounds:
    """
    Rectangle centred on (center_lat, center_lng).

    *half_width_deg* extends along longitude, *half_height_deg* along
    latitude.  Half-extents below MIN_BOUNDS_EPSILON_DEG are raised to it,
    so the result is never degenerate.
    """
    half_w = max(abs(half_width_deg), MIN_BOUNDS_EPSILON_DEG)
    half_h = max(abs(half_height_deg), MIN_BOUNDS_EPSILON_DEG)
    return Bounds(
        ne=Coordinate(center_lat + half_h, center_lng + half_w),
        sw=Coordinate(center_lat - half_h, center_lng - half_w),
    )


def bounds_from_corners(a: Coordinate, b: Coordinate) -> Bounds:
    """Box spanning two arbitrary corners, padded if it collapses on an axis."""
    south, north = sorted((a.latitude, b.latitude))
    west, east = sorted((a.longitude, b.longitude))
    if north - south < 2 * MIN_BOUNDS_EPSILON_DEG or east - west < 2 * MIN_BOUNDS_EPSILON_DEG:
        return bounds_of(
            (north + south) / 2, (east + west) / 2,
            (east - west) / 2, (north - south) / 2,
        )
    return Bounds(ne=Coordinate(north, east), sw=Coordinate(south, west))


def center_of(bounds: Bounds) -> Coordinate:
    return Coordinate(
        (bounds.ne.latitude + bounds.sw.latitude) / 2,
        (bounds.ne.longitude + bounds.sw.longitude) / 2,
    )


def area(bounds: Bounds) -> float:
    """
    Planar area in m² from the lat/lng deltas.

    Longitude is scaled at the box's mid-latitude.  An approximation for
    roof-sized boxes, not a geodesic area.
    """
    mid_lat = (bounds.ne.latitude + bounds.sw.latitude) / 2
    return lat_to_meters(bounds.lat_range) * lng_to_meters(bounds.lng_range, mid_lat)


def grid_spacing(range_deg: float, cell_count: int) -> float:
    """
    Spacing between grid lines when *cell_count* cells share *range_deg*.

    The ``+ 1`` leaves one spacing of margin before the first and after the
    last cell, so no cell centre touches the edge.
    """
    if cell_count <= 0:
        raise InvalidGeometry(f"cell_count must be positive, got {cell_count}")
    return range_deg / (cell_count + 1)
