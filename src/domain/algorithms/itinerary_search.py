from __future__ import annotations

import functools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Sequence

from src.domain.models import BusGraph, BusRoute, Itinerary, RouteLeg, TrafficSegment

from .duration import leg_duration, route_points

logger = logging.getLogger(__name__)

# Candidates closer than this are ranked by transfers first.
RANKING_TOLERANCE_MIN = 5


@dataclass(frozen=True, slots=True)
class SearchLimits:
    """Tuning knobs for the itinerary search.

    The one-transfer caps are empirical; they bound the quadratic scan on
    dense networks.
    """

    max_one_transfer_candidates: int = 50
    max_one_transfer_results: int = 5
    min_candidates_before_bfs: int = 3
    max_transfers: int = 3


def build_leg(
    graph: BusGraph,
    route: BusRoute,
    from_idx: int,
    to_idx: int,
    traffic: Sequence[TrafficSegment] | None = None,
) -> RouteLeg:
    points = route_points(graph, route.stop_ids)
    return RouteLeg(
        route_id=route.id,
        route_name=route.name,
        direction=route.direction,
        from_index=from_idx,
        to_index=to_idx,
        stop_ids=route.stop_ids[from_idx : to_idx + 1],
        duration_min=leg_duration(points, from_idx, to_idx, traffic),
    )


def compare_itineraries(a: Itinerary, b: Itinerary) -> int:
    """Clearly faster wins; otherwise fewer transfers, then duration."""

    diff = a.total_duration_min - b.total_duration_min
    if abs(diff) > RANKING_TOLERANCE_MIN:
        return -1 if diff < 0 else 1
    if a.transfer_count != b.transfer_count:
        return -1 if a.transfer_count < b.transfer_count else 1
    return (diff > 0) - (diff < 0)


def rank_itineraries(itineraries: Iterable[Itinerary]) -> list[Itinerary]:
    # list.sort is stable, so ties keep discovery order.
    return sorted(itineraries, key=functools.cmp_to_key(compare_itineraries))


def find_direct(graph: BusGraph, start_id: str, end_id: str) -> list[Itinerary]:
    if not graph.has_direct_route(start_id, end_id):
        return []

    end_routes = set(graph.routes_serving(end_id))
    out: list[Itinerary] = []
    for route_id in graph.routes_serving(start_id):
        if route_id not in end_routes:
            continue
        route = graph.route(route_id)
        if route is None:
            continue
        i = route.index_of(start_id)
        j = route.index_of(end_id)
        if i is not None and j is not None and i < j:
            out.append(Itinerary(legs=(build_leg(graph, route, i, j),)))
    return out


def find_one_transfer(
    graph: BusGraph, start_id: str, end_id: str, limits: SearchLimits
) -> list[Itinerary]:
    found: list[Itinerary] = []

    for first_id in graph.routes_serving(start_id):
        first = graph.route(first_id)
        if first is None:
            continue
        start_idx = first.index_of(start_id)
        if start_idx is None:
            continue

        for i in range(start_idx + 1, len(first)):
            transfer_id = first.stop_ids[i]
            for second_id in graph.routes_serving(transfer_id):
                if second_id == first_id:
                    continue
                second = graph.route(second_id)
                if second is None:
                    continue
                board_idx = second.index_of(transfer_id)
                end_idx = second.index_of(end_id)
                if board_idx is None or end_idx is None or board_idx >= end_idx:
                    continue

                found.append(
                    Itinerary(
                        legs=(
                            build_leg(graph, first, start_idx, i),
                            build_leg(graph, second, board_idx, end_idx),
                        )
                    )
                )
                if len(found) >= limits.max_one_transfer_candidates:
                    logger.debug(
                        "One-transfer scan %s -> %s hit the candidate cap (%d)",
                        start_id,
                        end_id,
                        limits.max_one_transfer_candidates,
                    )
                    return _best_by_stops(found, limits.max_one_transfer_results)

    return _best_by_stops(found, limits.max_one_transfer_results)


def _best_by_stops(found: list[Itinerary], keep: int) -> list[Itinerary]:
    found.sort(key=lambda it: it.total_stops)
    return found[:keep]


@dataclass(frozen=True, slots=True)
class _Ride:
    route: BusRoute
    from_idx: int
    to_idx: int


@dataclass(frozen=True, slots=True)
class _State:
    stop_id: str
    path: tuple[_Ride, ...]
    visited: frozenset[str]


def _materialize(graph: BusGraph, path: Sequence[_Ride]) -> Itinerary:
    return Itinerary(
        legs=tuple(build_leg(graph, r.route, r.from_idx, r.to_idx) for r in path)
    )


def find_multi_transfer(
    graph: BusGraph, start_id: str, end_id: str, limits: SearchLimits
) -> Itinerary | None:
    """Breadth-first search by number of rides; first hit has fewest transfers.

    A stop reached by any path is never queued again (global visited set).
    This prunes some valid alternatives in exchange for a bounded search.
    """

    queue: deque[_State] = deque()
    global_visited: set[str] = set()

    for route_id in graph.routes_serving(start_id):
        route = graph.route(route_id)
        if route is None:
            continue
        start_idx = route.index_of(start_id)
        if start_idx is None:
            continue

        for i in range(start_idx + 1, len(route)):
            stop_id = route.stop_ids[i]
            ride = _Ride(route, start_idx, i)
            if stop_id == end_id:
                return _materialize(graph, (ride,))
            if stop_id not in global_visited:
                global_visited.add(stop_id)
                queue.append(
                    _State(stop_id, (ride,), frozenset({start_id, stop_id}))
                )

    while queue:
        state = queue.popleft()
        if len(state.path) > limits.max_transfers:
            continue

        last_route_id = state.path[-1].route.id
        for route_id in graph.routes_serving(state.stop_id):
            if route_id == last_route_id:
                continue
            route = graph.route(route_id)
            if route is None:
                continue
            board_idx = route.index_of(state.stop_id)
            if board_idx is None:
                continue

            for i in range(board_idx + 1, len(route)):
                stop_id = route.stop_ids[i]
                if stop_id in state.visited:
                    continue

                path = state.path + (_Ride(route, board_idx, i),)
                if stop_id == end_id:
                    return _materialize(graph, path)

                if stop_id not in global_visited:
                    global_visited.add(stop_id)
                    queue.append(_State(stop_id, path, state.visited | {stop_id}))

    return None


def find_itineraries(
    graph: BusGraph,
    start_id: str,
    end_id: str,
    limits: SearchLimits | None = None,
) -> list[Itinerary]:
    """All candidate itineraries between two stops, best first.

    Unknown stops, identical endpoints and unreachable destinations all give
    an empty list.
    """

    limits = limits or SearchLimits()

    if start_id == end_id:
        return []
    if graph.stop(start_id) is None or graph.stop(end_id) is None:
        logger.debug("Unknown stop in search: %s -> %s", start_id, end_id)
        return []

    pooled: list[Itinerary] = []
    seen: set[tuple[tuple[str, int, int], ...]] = set()

    def _add(candidates: Iterable[Itinerary]) -> None:
        for it in candidates:
            if it.signature in seen:
                continue
            seen.add(it.signature)
            pooled.append(it)

    _add(find_direct(graph, start_id, end_id))
    _add(find_one_transfer(graph, start_id, end_id, limits))

    if len(pooled) < limits.min_candidates_before_bfs:
        fallback = find_multi_transfer(graph, start_id, end_id, limits)
        if fallback is not None:
            _add((fallback,))

    ranked = rank_itineraries(pooled)
    logger.debug(
        "Search %s -> %s produced %d itineraries", start_id, end_id, len(ranked)
    )
    return ranked
