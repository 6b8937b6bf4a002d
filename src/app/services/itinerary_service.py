from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.app.ports.output import IGraphRepository
from src.domain.algorithms.itinerary_search import SearchLimits, find_itineraries
from src.domain.models import BusGraph, GeoPoint, Itinerary, Stop

from .routing_helpers import candidate_stops, nearest_stop, walk_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Trip:
    """Door-to-door option: walk to a stop, ride, walk to the destination."""

    origin: GeoPoint
    destination: GeoPoint
    board_stop_id: str
    alight_stop_id: str
    walk_to_stop_m: float
    walk_from_stop_m: float
    walk_min: int
    itinerary: Itinerary

    @property
    def total_duration_min(self) -> int:
        return self.walk_min + self.itinerary.total_duration_min


@dataclass(slots=True)
class ItineraryService:
    """Trip planning over the static graph.

    - Stop-to-stop itineraries (direct, one transfer, multi-transfer fallback).
    - Coordinate-to-coordinate trips via nearby boarding/alighting stops.
    """

    graph_repository: IGraphRepository
    limits: SearchLimits = field(default_factory=SearchLimits)

    # Tuning knobs
    candidate_radius_m: float = 800.0
    max_candidate_stops: int = 5
    walk_speed_mps: float = 1.3
    max_trips: int = 3

    def graph(self) -> BusGraph:
        return self.graph_repository.load_graph()

    def find_itineraries(self, *, start_stop_id: str, end_stop_id: str) -> list[Itinerary]:
        return find_itineraries(self.graph(), start_stop_id, end_stop_id, self.limits)

    def search_stops(self, query: str, *, limit: int = 20) -> list[Stop]:
        return self.graph().search_stops(query, limit=limit)

    def nearby_stops(
        self, point: GeoPoint, *, radius_m: float | None = None, max_count: int = 20
    ) -> list[tuple[float, Stop]]:
        return candidate_stops(
            self.graph().stops_by_id.values(),
            point=point,
            radius_m=float(radius_m if radius_m is not None else self.candidate_radius_m),
            max_count=max_count,
        )

    def nearest_stop(self, point: GeoPoint) -> tuple[float, Stop] | None:
        return nearest_stop(self.graph().stops_by_id.values(), point)

    def find_trips(self, *, origin: GeoPoint, destination: GeoPoint) -> list[Trip]:
        graph = self.graph()

        origin_candidates = candidate_stops(
            graph.stops_by_id.values(),
            point=origin,
            radius_m=float(self.candidate_radius_m),
            max_count=int(self.max_candidate_stops),
        )
        dest_candidates = candidate_stops(
            graph.stops_by_id.values(),
            point=destination,
            radius_m=float(self.candidate_radius_m),
            max_count=int(self.max_candidate_stops),
        )
        if not origin_candidates or not dest_candidates:
            logger.info("No stops within %.0fm of trip endpoints", self.candidate_radius_m)
            return []

        best_by_signature: dict[tuple[tuple[str, int, int], ...], Trip] = {}
        for walk_in_m, board in origin_candidates:
            for walk_out_m, alight in dest_candidates:
                if board.id == alight.id:
                    continue

                itineraries = find_itineraries(graph, board.id, alight.id, self.limits)
                if not itineraries:
                    continue

                trip = Trip(
                    origin=origin,
                    destination=destination,
                    board_stop_id=board.id,
                    alight_stop_id=alight.id,
                    walk_to_stop_m=float(walk_in_m),
                    walk_from_stop_m=float(walk_out_m),
                    walk_min=walk_minutes(walk_in_m + walk_out_m, self.walk_speed_mps),
                    itinerary=itineraries[0],
                )
                key = trip.itinerary.signature
                current = best_by_signature.get(key)
                if current is None or trip.total_duration_min < current.total_duration_min:
                    best_by_signature[key] = trip

        trips = sorted(
            best_by_signature.values(),
            key=lambda t: (t.total_duration_min, t.itinerary.transfer_count),
        )
        return trips[: max(0, self.max_trips)]
