from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class VehicleStatus(str, Enum):
    AT_STOP = "at_stop"
    DEPARTED = "departed"


class ArrivalStatus(str, Enum):
    ARRIVING = "arriving"
    ACTIVE = "active"
    NO_APPROACHING = "no_approaching"
    NO_SERVICE = "no_service"


@dataclass(frozen=True, slots=True)
class LiveVehicleAtStop:
    """A vehicle reported at, or just departed from, a stop of a route."""

    plate: str
    stop_id: str
    status: VehicleStatus
    speed_kmh: float | None = None


@dataclass(frozen=True, slots=True)
class RouteVehicleSnapshot:
    """One poll of the live feed for a route/direction/route-type lookup.

    Stops are in the order reported by the feed; vehicles are keyed by the
    index of the stop they were reported at.
    """

    route_name: str
    direction: str
    route_type: str
    stop_ids: tuple[str, ...]
    vehicles_by_stop_index: dict[int, tuple[LiveVehicleAtStop, ...]] = field(
        default_factory=dict, hash=False
    )

    @property
    def vehicle_count(self) -> int:
        return sum(len(v) for v in self.vehicles_by_stop_index.values())


@dataclass(frozen=True, slots=True)
class ApproachingVehicle:
    plate: str
    stop_index: int
    current_stop_id: str | None
    stops_away: int
    eta_min: int
    distance_m: int
    en_route: bool = False


@dataclass(frozen=True, slots=True)
class ArrivalEstimate:
    target_index: int
    approaching: tuple[ApproachingVehicle, ...] = ()
    display_limit: int = 2

    @property
    def buses(self) -> tuple[ApproachingVehicle, ...]:
        return self.approaching[: self.display_limit]

    @property
    def min_stops_away(self) -> int | None:
        if not self.approaching:
            return None
        return min(v.stops_away for v in self.approaching)

    @property
    def min_eta_min(self) -> int | None:
        if not self.approaching:
            return None
        return self.approaching[0].eta_min

    @property
    def vehicle_at_target(self) -> bool:
        # En-route vehicles are zero stops away too, but not at the stop.
        return any(v.stop_index == self.target_index for v in self.approaching)


@dataclass(frozen=True, slots=True)
class RouteArrival:
    route_name: str
    direction: str
    route_type: str
    target_index: int
    total_stops: int
    destination_stop_id: str | None
    status: ArrivalStatus
    estimate: ArrivalEstimate

    @property
    def buses(self) -> tuple[ApproachingVehicle, ...]:
        return self.estimate.buses
