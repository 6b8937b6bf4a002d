from __future__ import annotations

from dataclasses import dataclass, field

# Fixed penalties added on top of ride time when pricing an itinerary.
INITIAL_WAIT_MIN = 5
TRANSFER_PENALTY_MIN = 5


@dataclass(frozen=True, slots=True)
class BusRoute:
    """One direction of a physical bus line.

    Stops are listed in travel order and appear at most once, so a ride along
    the route always goes from a lower to a higher index.
    """

    id: str
    name: str
    direction: str
    stop_ids: tuple[str, ...] = ()

    _index: dict[str, int] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        index: dict[str, int] = {}
        for i, stop_id in enumerate(self.stop_ids):
            if stop_id in index:
                raise ValueError(f"Route {self.id} visits stop {stop_id} twice")
            index[stop_id] = i
        object.__setattr__(self, "_index", index)

    def index_of(self, stop_id: str) -> int | None:
        return self._index.get(stop_id)

    def __len__(self) -> int:
        return len(self.stop_ids)


@dataclass(frozen=True, slots=True)
class RouteLeg:
    route_id: str
    route_name: str
    direction: str
    from_index: int
    to_index: int
    stop_ids: tuple[str, ...]
    duration_min: int = 0

    def __post_init__(self) -> None:
        if self.from_index >= self.to_index:
            raise ValueError(
                f"Leg on {self.route_id} must move forward "
                f"({self.from_index} -> {self.to_index})"
            )

    @property
    def from_stop_id(self) -> str:
        return self.stop_ids[0]

    @property
    def to_stop_id(self) -> str:
        return self.stop_ids[-1]

    @property
    def stop_count(self) -> int:
        return len(self.stop_ids)

    @property
    def signature(self) -> tuple[str, int, int]:
        return (self.route_id, self.from_index, self.to_index)


@dataclass(frozen=True, slots=True)
class Itinerary:
    """A journey made of one or more sequential legs."""

    legs: tuple[RouteLeg, ...] = ()

    @property
    def transfer_count(self) -> int:
        return max(0, len(self.legs) - 1)

    @property
    def total_stops(self) -> int:
        # Transfer stops are shared by consecutive legs.
        if not self.legs:
            return 0
        return sum(leg.stop_count for leg in self.legs) - (len(self.legs) - 1)

    @property
    def ride_duration_min(self) -> int:
        return sum(leg.duration_min for leg in self.legs)

    @property
    def total_duration_min(self) -> int:
        if not self.legs:
            return 0
        return (
            self.ride_duration_min
            + INITIAL_WAIT_MIN
            + self.transfer_count * TRANSFER_PENALTY_MIN
        )

    @property
    def signature(self) -> tuple[tuple[str, int, int], ...]:
        return tuple(leg.signature for leg in self.legs)

    def with_legs(self, legs: tuple[RouteLeg, ...]) -> Itinerary:
        return Itinerary(legs=legs)
