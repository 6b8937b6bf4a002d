from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from src.app.ports.output import IGraphRepository, ILiveVehicleProvider, ITrafficProvider
from src.domain.algorithms.arrivals import (
    arrival_status,
    estimate_arrivals,
    find_stop_index,
)
from src.domain.algorithms.duration import route_points
from src.domain.models import RouteArrival, RouteVehicleSnapshot, TrafficSegment

logger = logging.getLogger(__name__)


def pick_snapshot(
    snapshots: list[RouteVehicleSnapshot], stop_id: str
) -> tuple[RouteVehicleSnapshot, int] | None:
    """The snapshot listing `stop_id` with the most vehicles (first wins ties)."""

    best: tuple[RouteVehicleSnapshot, int] | None = None
    for snapshot in snapshots:
        idx = find_stop_index(snapshot.stop_ids, stop_id)
        if idx is None:
            continue
        if best is None or snapshot.vehicle_count > best[0].vehicle_count:
            best = (snapshot, idx)
    return best


@dataclass(slots=True)
class ArrivalService:
    """Live arrival estimates for a stop.

    - Queries every route type concurrently and keeps the richest answer.
    - Traffic is optional; without it the free-flow duration model is used.
    """

    graph_repository: IGraphRepository
    vehicle_provider: ILiveVehicleProvider
    traffic_provider: ITrafficProvider | None = None

    route_types: tuple[str, ...] = ("0", "2")
    directions: tuple[str, ...] = ("0", "1")

    async def _lookup(self, route_name: str, direction: str) -> list[RouteVehicleSnapshot]:
        results = await asyncio.gather(
            *(
                self.vehicle_provider.fetch_route_vehicles(
                    route_name=route_name, direction=direction, route_type=rt
                )
                for rt in self.route_types
            ),
            return_exceptions=True,
        )

        snapshots: list[RouteVehicleSnapshot] = []
        for route_type, result in zip(self.route_types, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Live lookup %s/%s type %s failed: %s",
                    route_name,
                    direction,
                    route_type,
                    result,
                )
                continue
            if result is not None:
                snapshots.append(result)
        return snapshots

    async def _traffic(self, route_name: str, direction: str) -> tuple[TrafficSegment, ...]:
        if self.traffic_provider is None:
            return ()
        try:
            return tuple(
                await self.traffic_provider.fetch_segments(
                    route_name=route_name, direction=direction
                )
            )
        except Exception as exc:
            logger.warning("Traffic fetch failed for %s/%s: %s", route_name, direction, exc)
            return ()

    async def route_arrivals(
        self, *, stop_id: str, route_name: str, direction: str
    ) -> RouteArrival | None:
        """Estimate for one route direction, or None if no feed lists the stop."""

        snapshots, traffic = await asyncio.gather(
            self._lookup(route_name, direction), self._traffic(route_name, direction)
        )

        picked = pick_snapshot(snapshots, stop_id)
        if picked is None:
            return None
        snapshot, target_index = picked

        graph = self.graph_repository.load_graph()
        points = route_points(graph, snapshot.stop_ids)
        estimate = estimate_arrivals(
            points,
            target_index,
            snapshot.vehicles_by_stop_index,
            traffic or None,
            stop_ids=snapshot.stop_ids,
        )

        return RouteArrival(
            route_name=route_name,
            direction=direction,
            route_type=snapshot.route_type,
            target_index=target_index,
            total_stops=len(snapshot.stop_ids),
            destination_stop_id=snapshot.stop_ids[-1] if snapshot.stop_ids else None,
            status=arrival_status(estimate, snapshot.vehicle_count),
            estimate=estimate,
        )

    async def _first_direction(self, stop_id: str, route_name: str) -> RouteArrival | None:
        for direction in self.directions:
            arrival = await self.route_arrivals(
                stop_id=stop_id, route_name=route_name, direction=direction
            )
            if arrival is not None:
                return arrival
        return None

    async def stop_arrivals(self, *, stop_id: str) -> dict[str, RouteArrival | None]:
        """Per route name serving the stop; None means no service at this stop."""

        graph = self.graph_repository.load_graph()
        route_names = graph.route_names_serving(stop_id)
        if not route_names:
            return {}

        results = await asyncio.gather(
            *(self._first_direction(stop_id, name) for name in route_names),
            return_exceptions=True,
        )

        out: dict[str, RouteArrival | None] = {}
        for name, result in zip(route_names, results):
            if isinstance(result, BaseException):
                logger.warning("Arrivals for route %s at %s failed: %s", name, stop_id, result)
                out[name] = None
            else:
                out[name] = result
        return out
