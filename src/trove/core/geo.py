"""Geospatial helpers backing every geofence decision.

Distances use the haversine formula on a spherical Earth. Inputs are not
range-checked here; NaN propagates to the result and callers validate
coordinates with `is_valid_coordinate` before relying on a distance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

import pygeohash

EARTH_RADIUS_M: Final[float] = 6_371_000.0
DEFAULT_GEOHASH_PRECISION: Final[int] = 9


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle distance in meters between two points."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def within_geofence(point: Coordinate, center: Coordinate, radius_m: float) -> tuple[bool, float]:
    """Return whether `point` lies inside the circle and the distance to its center.

    The boundary is inclusive: a point exactly `radius_m` away is inside.
    """
    distance = distance_meters(point, center)
    return distance <= radius_m, distance


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Return True for finite latitude in [-90, 90] and longitude in [-180, 180]."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def geohash_for(lat: float, lng: float, precision: int = DEFAULT_GEOHASH_PRECISION) -> str:
    """Return the geohash spatial index token for a coordinate."""
    return pygeohash.encode(lat, lng, precision=precision)


@dataclass(frozen=True)
class BoundingBox:
    """Map viewport in decimal degrees; `west > east` crosses the antimeridian."""

    south: float
    west: float
    north: float
    east: float

    def is_valid(self) -> bool:
        corners_ok = is_valid_coordinate(self.south, self.west) and is_valid_coordinate(
            self.north, self.east
        )
        return corners_ok and self.south <= self.north

    def contains(self, point: Coordinate) -> bool:
        if not self.south <= point.lat <= self.north:
            return False
        if self.west <= self.east:
            return self.west <= point.lng <= self.east
        return point.lng >= self.west or point.lng <= self.east
