from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from src.app.ports.output import IGraphRepository, ITrafficProvider
from src.domain.algorithms.duration import leg_duration, route_points
from src.domain.algorithms.itinerary_search import rank_itineraries
from src.domain.models import Itinerary, RouteLeg, TrafficSegment

from .staleness import RequestToken, RequestTracker

logger = logging.getLogger(__name__)

RouteKey = tuple[str, str]


@dataclass(slots=True)
class TrafficEnrichmentService:
    """Re-prices itineraries with live traffic.

    Each (route name, direction) is fetched once, all fetches run
    concurrently, and a failed fetch only leaves its own legs traffic-free.
    """

    graph_repository: IGraphRepository
    traffic_provider: ITrafficProvider

    async def fetch_traffic(
        self, keys: Iterable[RouteKey]
    ) -> dict[RouteKey, tuple[TrafficSegment, ...]]:
        unique = list(dict.fromkeys(keys))
        results = await asyncio.gather(
            *(
                self.traffic_provider.fetch_segments(route_name=name, direction=direction)
                for name, direction in unique
            ),
            return_exceptions=True,
        )

        out: dict[RouteKey, tuple[TrafficSegment, ...]] = {}
        for key, result in zip(unique, results):
            if isinstance(result, BaseException):
                logger.warning("Traffic fetch failed for %s/%s: %s", key[0], key[1], result)
                out[key] = ()
            else:
                out[key] = tuple(result or ())
        return out

    async def enrich(self, itineraries: Sequence[Itinerary]) -> list[Itinerary]:
        if not itineraries:
            return []

        keys = [
            (leg.route_name, leg.direction) for it in itineraries for leg in it.legs
        ]
        traffic = await self.fetch_traffic(keys)

        graph = self.graph_repository.load_graph()
        refreshed: list[Itinerary] = []
        for it in itineraries:
            legs: list[RouteLeg] = []
            for leg in it.legs:
                points = route_points(graph, graph.stops_of(leg.route_id))
                if leg.to_index >= len(points):
                    # Route no longer matches the leg; keep the old estimate.
                    legs.append(leg)
                    continue
                minutes = leg_duration(
                    points,
                    leg.from_index,
                    leg.to_index,
                    traffic.get((leg.route_name, leg.direction)) or None,
                )
                legs.append(
                    RouteLeg(
                        route_id=leg.route_id,
                        route_name=leg.route_name,
                        direction=leg.direction,
                        from_index=leg.from_index,
                        to_index=leg.to_index,
                        stop_ids=leg.stop_ids,
                        duration_min=minutes,
                    )
                )
            refreshed.append(it.with_legs(tuple(legs)))

        return rank_itineraries(refreshed)

    async def enrich_for(
        self,
        tracker: RequestTracker,
        token: RequestToken,
        itineraries: Sequence[Itinerary],
    ) -> list[Itinerary] | None:
        """Like `enrich`, but returns None when a newer request superseded `token`."""

        enriched = await self.enrich(itineraries)
        if not tracker.is_current(token):
            logger.debug("Discarding stale enrichment for %s", token.key)
            return None
        return enriched
