from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.persistence.local_graph_repository import LocalGraphRepository
from src.adapters.persistence.s3_graph_repository import S3GraphRepository
from src.adapters.realtime.http_live_vehicle_provider import HttpLiveVehicleProvider
from src.adapters.realtime.http_traffic_provider import HttpTrafficProvider
from src.app.ports.output import IGraphRepository
from src.app.services.arrival_service import ArrivalService
from src.app.services.itinerary_service import ItineraryService
from src.app.services.traffic_enrichment_service import TrafficEnrichmentService
from src.domain.algorithms.itinerary_search import SearchLimits


@lru_cache(maxsize=1)
def get_graph_repository() -> IGraphRepository:
    # One repository per process so the graph is parsed once.
    source = (os.getenv("BUS_GRAPH_SOURCE") or "local").strip().lower()
    if source == "s3":
        return S3GraphRepository()
    if source != "local":
        raise RuntimeError(f"Unsupported BUS_GRAPH_SOURCE: {source}")
    return LocalGraphRepository()


def _search_limits() -> SearchLimits:
    defaults = SearchLimits()
    return SearchLimits(
        max_one_transfer_candidates=int(
            os.getenv("MAX_ONE_TRANSFER_CANDIDATES")
            or defaults.max_one_transfer_candidates
        ),
        max_one_transfer_results=int(
            os.getenv("MAX_ONE_TRANSFER_RESULTS") or defaults.max_one_transfer_results
        ),
        min_candidates_before_bfs=defaults.min_candidates_before_bfs,
        max_transfers=int(os.getenv("MAX_TRANSFERS") or defaults.max_transfers),
    )


def get_itinerary_service() -> ItineraryService:
    service = ItineraryService(
        graph_repository=get_graph_repository(), limits=_search_limits()
    )

    # Allow tuning via env without changing code.
    if os.getenv("CANDIDATE_RADIUS_M"):
        service.candidate_radius_m = float(os.environ["CANDIDATE_RADIUS_M"])
    if os.getenv("MAX_CANDIDATE_STOPS"):
        service.max_candidate_stops = int(os.environ["MAX_CANDIDATE_STOPS"])

    return service


def get_traffic_enrichment_service() -> TrafficEnrichmentService:
    return TrafficEnrichmentService(
        graph_repository=get_graph_repository(),
        traffic_provider=HttpTrafficProvider(),
    )


def get_arrival_service() -> ArrivalService:
    service = ArrivalService(
        graph_repository=get_graph_repository(),
        vehicle_provider=HttpLiveVehicleProvider(),
        traffic_provider=HttpTrafficProvider(),
    )

    raw_types = (os.getenv("LIVE_ROUTE_TYPES") or "").strip()
    if raw_types:
        types = tuple(t.strip() for t in raw_types.split(",") if t.strip())
        if types:
            service.route_types = types

    return service
