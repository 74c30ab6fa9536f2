"""Geo-fence helpers: coordinate validation and haversine distance.

All inputs are decimal degrees; distances are meters on a sphere of radius
EARTH_RADIUS_METERS.
"""

from __future__ import annotations

import math
from typing import Any, Tuple

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import InvalidCoordinates


def _as_degrees(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or value is None:
        raise InvalidCoordinates(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidCoordinates(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise InvalidCoordinates(f"{field_name} must be a finite number")
    return number


def validate_coordinates(latitude: Any, longitude: Any) -> Tuple[float, float]:
    lat = _as_degrees(latitude, "Latitude")
    lon = _as_degrees(longitude, "Longitude")
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinates("Invalid latitude. Must be between -90 and 90")
    if not -180.0 <= lon <= 180.0:
        raise InvalidCoordinates("Invalid longitude. Must be between -180 and 180")
    return lat, lon


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1, lon1 = validate_coordinates(lat1, lon1)
    lat2, lon2 = validate_coordinates(lat2, lon2)

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push `a` a hair past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_within_radius(
    point_lat: float,
    point_lon: float,
    center_lat: float,
    center_lon: float,
    radius_meters: float,
) -> bool:
    return distance_meters(point_lat, point_lon, center_lat, center_lon) <= radius_meters
