from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class TrafficSegment:
    """Congestion of one inter-stop segment, indexed by position along a route.

    `level` is ordinal: 1 smooth, 2 moderate, 3+ congested.
    """

    level: int
    path: tuple[GeoPoint, ...] = ()
    station_code: str | None = None
