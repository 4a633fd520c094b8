"""Geospatial helpers for radius search.

Distances are great-circle distances on a spherical Earth. The bounding box is
a cheap rectangular pre-filter; anything that must be exact goes through
``haversine_distance_km``.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.0
# Floor for cos(latitude) so the longitude span stays finite at the poles.
MIN_COS_LATITUDE = 1e-6


class GeoValidationError(ValueError):
    """Raised for out-of-range coordinates, radii or paging parameters."""


def _check_coordinate(name: str, value: float, limit: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise GeoValidationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value) or not -limit <= value <= limit:
        raise GeoValidationError(f"{name} must be within [-{limit:g}, {limit:g}], got {value}")
    return value


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        object.__setattr__(self, "latitude", _check_coordinate("latitude", self.latitude, 90))
        object.__setattr__(self, "longitude", _check_coordinate("longitude", self.longitude, 180))


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.west > self.east

    def contains(self, point: GeoPoint) -> bool:
        if not self.south <= point.latitude <= self.north:
            return False
        if self.crosses_antimeridian:
            return point.longitude >= self.west or point.longitude <= self.east
        return self.west <= point.longitude <= self.east


def _check_radius(radius_km: float) -> float:
    try:
        radius_km = float(radius_km)
    except (TypeError, ValueError):
        raise GeoValidationError(f"radius_km must be a number, got {radius_km!r}") from None
    if not math.isfinite(radius_km) or radius_km <= 0:
        raise GeoValidationError(f"radius_km must be greater than 0, got {radius_km}")
    return radius_km


def compute_bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Rectangle in degrees that encloses every point within ``radius_km`` of ``center``.

    Uses 1 degree of latitude ~ 111 km and scales the longitude span by
    cos(latitude). The span is widened to the exact great-circle extent where
    that is larger, so the box is always a superset of the search circle.
    """
    radius_km = _check_radius(radius_km)

    lat_delta = radius_km / KM_PER_DEGREE_LAT
    north = min(center.latitude + lat_delta, 90.0)
    south = max(center.latitude - lat_delta, -90.0)

    cos_lat = max(math.cos(math.radians(center.latitude)), MIN_COS_LATITUDE)
    angular = radius_km / EARTH_RADIUS_KM
    reach = math.sin(min(angular, math.pi / 2)) / cos_lat

    # The circle contains a pole (or wraps the globe): every longitude qualifies.
    if reach >= 1.0 or north >= 90.0 or south <= -90.0:
        return BoundingBox(north=north, south=south, east=180.0, west=-180.0)

    lon_delta = max(
        radius_km / (KM_PER_DEGREE_LAT * cos_lat),
        math.degrees(math.asin(reach)),
    )
    if lon_delta >= 180.0:
        return BoundingBox(north=north, south=south, east=180.0, west=-180.0)

    west = center.longitude - lon_delta
    east = center.longitude + lon_delta
    if west < -180.0:
        west += 360.0
    if east > 180.0:
        east -= 360.0
    return BoundingBox(north=north, south=south, east=east, west=west)


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in kilometres between two points."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_point_in_radius(center: GeoPoint, point: GeoPoint, radius_km: float) -> bool:
    return haversine_distance_km(center, point) <= _check_radius(radius_km)


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


def parse_coordinates(text: str) -> GeoPoint | None:
    """Parse ``"lat, lon"``. Returns None for anything malformed or out of range."""
    if not text:
        return None
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        return None
    try:
        return GeoPoint(float(parts[0]), float(parts[1]))
    except (ValueError, GeoValidationError):
        return None


def _as_radians(points: Iterable[GeoPoint]) -> tuple[np.ndarray, np.ndarray]:
    arr = np.array([(p.latitude, p.longitude) for p in points], dtype=float).reshape(-1, 2)
    rad = np.radians(arr)
    return rad[:, 0], rad[:, 1]


def distance_matrix(origins: Sequence[GeoPoint], destinations: Sequence[GeoPoint]) -> np.ndarray:
    """Straight-line distances (km) from every origin to every destination.

    Row ``i`` holds the distances from ``origins[i]``. Vectorised version of
    ``haversine_distance_km``.
    """
    lat1, lon1 = _as_radians(origins)
    lat2, lon2 = _as_radians(destinations)

    dlat = lat2[np.newaxis, :] - lat1[:, np.newaxis]
    dlon = lon2[np.newaxis, :] - lon1[:, np.newaxis]
    h = (
        np.sin(dlat / 2) ** 2
        + np.cos(lat1)[:, np.newaxis] * np.cos(lat2)[np.newaxis, :] * np.sin(dlon / 2) ** 2
    )
    h = np.clip(h, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
