from __future__ import annotations

import math
from typing import Iterable

from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.models import GeoPoint, Stop


def candidate_stops(
    stops: Iterable[Stop], *, point: GeoPoint, radius_m: float, max_count: int
) -> list[tuple[float, Stop]]:
    """Stops within `radius_m` of a point, nearest first, with their distance.

    Stops without coordinates cannot be placed and are skipped.
    """

    scored: list[tuple[float, Stop]] = []
    for stop in stops:
        if stop.location is None:
            continue
        d = haversine_distance_m(point, stop.location)
        if d <= radius_m:
            scored.append((d, stop))

    scored.sort(key=lambda x: x[0])
    return scored[: max(0, max_count)]


def nearest_stop(stops: Iterable[Stop], point: GeoPoint) -> tuple[float, Stop] | None:
    best: tuple[float, Stop] | None = None
    for stop in stops:
        if stop.location is None:
            continue
        d = haversine_distance_m(point, stop.location)
        if best is None or d < best[0]:
            best = (d, stop)
    return best


def walk_minutes(distance_m: float, walk_speed_mps: float) -> int:
    if distance_m <= 0.0:
        return 0
    return int(math.ceil(distance_m / walk_speed_mps / 60.0))
