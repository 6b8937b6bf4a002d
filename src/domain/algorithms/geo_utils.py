from __future__ import annotations

import math

from src.domain.models import GeoPoint

EARTH_RADIUS_M = 6371000.0

# Used for a segment when either stop has no coordinates.
FALLBACK_SEGMENT_M = 400.0


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""

    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dlat = p2 - p1
    dlon = math.radians(lon2) - math.radians(lon1)

    s = math.sin(dlat / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dlon / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(s)))


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    return distance_m(a.lat, a.lon, b.lat, b.lon)


def segment_distance_m(a: GeoPoint | None, b: GeoPoint | None) -> float:
    if a is None or b is None:
        return FALLBACK_SEGMENT_M
    return haversine_distance_m(a, b)

