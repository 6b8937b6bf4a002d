from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from src.app.services.staleness import RequestTracker
from src.app.services.traffic_enrichment_service import TrafficEnrichmentService
from src.domain.algorithms.duration import leg_duration, route_points
from src.domain.algorithms.itinerary_search import find_itineraries
from src.domain.exceptions import FeedError
from src.domain.models import BusGraph, BusRoute, GeoPoint, Stop, TrafficSegment

DEG_PER_KM = 1.0 / 111.19492664455873


def _graph() -> BusGraph:
    # A-B-C-D on R0, C-D-E on R1.
    serving = {
        "A": ("R0_0",),
        "B": ("R0_0",),
        "C": ("R0_0", "R1_0"),
        "D": ("R0_0", "R1_0"),
        "E": ("R1_0",),
    }
    return BusGraph(
        stops_by_id={
            sid: Stop(
                id=sid,
                location=GeoPoint(lat=0.0, lon=i * 1.1 * DEG_PER_KM),
                route_ids=routes,
            )
            for i, (sid, routes) in enumerate(serving.items())
        },
        routes_by_id={
            "R0_0": BusRoute(id="R0_0", name="R0", direction="0", stop_ids=("A", "B", "C", "D")),
            "R1_0": BusRoute(id="R1_0", name="R1", direction="0", stop_ids=("C", "D", "E")),
        },
    )


@dataclass(slots=True)
class FakeGraphRepository:
    graph: BusGraph

    def load_graph(self) -> BusGraph:
        return self.graph


@dataclass(slots=True)
class FakeTrafficProvider:
    answers: dict[tuple[str, str], object]
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def fetch_segments(self, *, route_name: str, direction: str):
        self.calls.append((route_name, direction))
        answer = self.answers.get((route_name, direction), ())
        if isinstance(answer, Exception):
            raise answer
        return answer


CONGESTED = (TrafficSegment(level=3),) * 3


def _service(answers) -> tuple[TrafficEnrichmentService, FakeTrafficProvider, BusGraph]:
    graph = _graph()
    provider = FakeTrafficProvider(answers=answers)
    svc = TrafficEnrichmentService(
        graph_repository=FakeGraphRepository(graph), traffic_provider=provider
    )
    return svc, provider, graph


def test_each_route_direction_is_fetched_once() -> None:
    svc, provider, graph = _service({})
    itineraries = find_itineraries(graph, "A", "E")
    assert len(itineraries) >= 2

    asyncio.run(svc.enrich(itineraries))

    assert sorted(provider.calls) == [("R0", "0"), ("R1", "0")]


def test_failed_route_keeps_free_flow_durations() -> None:
    svc, _, graph = _service(
        {("R0", "0"): CONGESTED, ("R1", "0"): FeedError("traffic", "down")}
    )
    before = find_itineraries(graph, "A", "E")

    after = asyncio.run(svc.enrich(before))

    old = {leg.signature: leg.duration_min for it in before for leg in it.legs}
    points = route_points(graph, graph.stops_of("R0_0"))
    for it in after:
        r0, r1 = it.legs
        assert r0.duration_min == leg_duration(points, r0.from_index, r0.to_index, CONGESTED)
        assert r0.duration_min > old[r0.signature]
        assert r1.duration_min == old[r1.signature]


def test_enrichment_is_idempotent() -> None:
    svc, _, graph = _service({("R0", "0"): CONGESTED})
    itineraries = find_itineraries(graph, "A", "E")

    once = asyncio.run(svc.enrich(itineraries))
    twice = asyncio.run(svc.enrich(once))

    assert [it.signature for it in once] == [it.signature for it in twice]
    assert [it.total_duration_min for it in once] == [it.total_duration_min for it in twice]


def test_no_traffic_leaves_durations_unchanged() -> None:
    svc, _, graph = _service({})
    itineraries = find_itineraries(graph, "A", "D")

    enriched = asyncio.run(svc.enrich(itineraries))

    assert enriched == itineraries


def test_empty_input_fetches_nothing() -> None:
    svc, provider, _ = _service({})
    assert asyncio.run(svc.enrich([])) == []
    assert provider.calls == []


def test_enrich_for_drops_superseded_results() -> None:
    svc, _, graph = _service({("R0", "0"): CONGESTED})
    itineraries = find_itineraries(graph, "A", "E")
    tracker = RequestTracker()

    stale = tracker.issue("A->E")
    current = tracker.issue("A->E")

    assert asyncio.run(svc.enrich_for(tracker, stale, itineraries)) is None
    assert asyncio.run(svc.enrich_for(tracker, current, itineraries))
