from __future__ import annotations

import math
from typing import Sequence

from src.domain.models import BusGraph, GeoPoint, TrafficSegment

from .geo_utils import segment_distance_m

# Free-flow ride time, roughly 40 km/h.
BASE_MIN_PER_KM = 1.5
DWELL_MIN_PER_STOP = 0.5
# Below this path length a zero-minute estimate is allowed to stand.
MIN_FLOOR_DISTANCE_KM = 0.1


def traffic_multiplier(level: int | None) -> float:
    """Scale factor applied to free-flow time for an ordinal congestion level."""

    if level is None:
        return 1.0
    if level >= 3:
        return 2.0
    if level >= 2:
        return 1.5
    return 1.0


def _segment_level(
    traffic: Sequence[TrafficSegment] | None, index: int
) -> int | None:
    if not traffic or index < 0 or index >= len(traffic):
        return None
    return traffic[index].level


def path_distance_km(
    points: Sequence[GeoPoint | None], from_idx: int, to_idx: int
) -> float:
    total_m = 0.0
    for j in range(from_idx, to_idx):
        total_m += segment_distance_m(points[j], points[j + 1])
    return total_m / 1000.0


def ride_time_min(
    points: Sequence[GeoPoint | None],
    from_idx: int,
    to_idx: int,
    traffic: Sequence[TrafficSegment] | None = None,
) -> float:
    """Traffic-adjusted ride time, excluding dwell.

    `traffic` is indexed by segment position along the whole route, so
    segment j (stop j -> stop j+1) uses traffic[j].
    """

    total = 0.0
    for j in range(from_idx, to_idx):
        km = segment_distance_m(points[j], points[j + 1]) / 1000.0
        total += km * BASE_MIN_PER_KM * traffic_multiplier(_segment_level(traffic, j))
    return total


def leg_duration(
    points: Sequence[GeoPoint | None],
    from_idx: int,
    to_idx: int,
    traffic: Sequence[TrafficSegment] | None = None,
) -> int:
    """Estimated minutes to ride from stop `from_idx` to stop `to_idx`.

    Ride time plus a fixed dwell per stop, rounded half up. A non-empty range
    covering more than 100 m never rounds down to zero.
    """

    if to_idx <= from_idx:
        return 0
    if from_idx < 0 or to_idx >= len(points):
        raise IndexError(
            f"Stop range {from_idx}..{to_idx} outside route of {len(points)} stops"
        )

    stops_away = to_idx - from_idx
    raw = ride_time_min(points, from_idx, to_idx, traffic) + stops_away * DWELL_MIN_PER_STOP
    minutes = int(math.floor(raw + 0.5))

    if minutes == 0 and path_distance_km(points, from_idx, to_idx) > MIN_FLOOR_DISTANCE_KM:
        minutes = 1
    return max(0, minutes)


def route_points(graph: BusGraph, stop_ids: Sequence[str]) -> list[GeoPoint | None]:
    """Coordinates for each stop id (None where the stop has no geodata)."""

    out: list[GeoPoint | None] = []
    for stop_id in stop_ids:
        stop = graph.stop(stop_id) or graph.resolve_stop(stop_id)
        out.append(stop.location if stop else None)
    return out
