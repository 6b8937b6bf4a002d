from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import (
    get_itinerary_service,
    get_traffic_enrichment_service,
)
from src.adapters.api.schemas.itineraries import (
    ItinerariesResponseSchema,
    ItinerarySchema,
    RouteLegSchema,
    TripRequestSchema,
    TripSchema,
)
from src.app.services.itinerary_service import ItineraryService
from src.app.services.traffic_enrichment_service import TrafficEnrichmentService
from src.domain.exceptions import NoPathFound
from src.domain.models import BusGraph, GeoPoint, Itinerary

router = APIRouter(tags=["itineraries"])


def _stop_name(graph: BusGraph, stop_id: str, lang: str | None) -> str:
    stop = graph.stop(stop_id)
    return stop.display_name(lang) if stop else stop_id


def itinerary_to_schema(
    graph: BusGraph, itinerary: Itinerary, lang: str | None = None
) -> ItinerarySchema:
    return ItinerarySchema(
        legs=[
            RouteLegSchema(
                route_id=leg.route_id,
                route_name=leg.route_name,
                direction=leg.direction,
                from_stop_id=leg.from_stop_id,
                to_stop_id=leg.to_stop_id,
                from_stop_name=_stop_name(graph, leg.from_stop_id, lang),
                to_stop_name=_stop_name(graph, leg.to_stop_id, lang),
                from_index=leg.from_index,
                to_index=leg.to_index,
                stop_count=leg.stop_count,
                stops=list(leg.stop_ids),
                duration_min=leg.duration_min,
            )
            for leg in itinerary.legs
        ],
        total_stops=itinerary.total_stops,
        transfer_count=itinerary.transfer_count,
        total_duration_min=itinerary.total_duration_min,
    )


@router.get("/itineraries", response_model=ItinerariesResponseSchema)
async def find_itineraries(
    from_stop: str = Query(..., min_length=1),
    to_stop: str = Query(..., min_length=1),
    enrich: bool = True,
    lang: str | None = None,
    service: ItineraryService = Depends(get_itinerary_service),
    enrichment: TrafficEnrichmentService = Depends(get_traffic_enrichment_service),
) -> ItinerariesResponseSchema:
    graph = service.graph()
    for stop_id in (from_stop, to_stop):
        if graph.stop(stop_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown stop: {stop_id}")

    itineraries = service.find_itineraries(start_stop_id=from_stop, end_stop_id=to_stop)
    if not itineraries:
        raise NoPathFound(f"No itinerary from {from_stop} to {to_stop}")

    if enrich:
        itineraries = await enrichment.enrich(itineraries)

    return ItinerariesResponseSchema(
        from_stop=from_stop,
        to_stop=to_stop,
        traffic_applied=enrich,
        itineraries=[itinerary_to_schema(graph, it, lang) for it in itineraries],
    )


@router.post("/trips", response_model=list[TripSchema])
def find_trips(
    req: TripRequestSchema,
    lang: str | None = None,
    service: ItineraryService = Depends(get_itinerary_service),
) -> list[TripSchema]:
    trips = service.find_trips(
        origin=GeoPoint(lat=req.origin.lat, lon=req.origin.lon),
        destination=GeoPoint(lat=req.destination.lat, lon=req.destination.lon),
    )
    if not trips:
        raise NoPathFound("No route found between these locations")

    graph = service.graph()
    return [
        TripSchema(
            board_stop_id=t.board_stop_id,
            alight_stop_id=t.alight_stop_id,
            walk_to_stop_m=round(t.walk_to_stop_m, 1),
            walk_from_stop_m=round(t.walk_from_stop_m, 1),
            walk_min=t.walk_min,
            total_duration_min=t.total_duration_min,
            itinerary=itinerary_to_schema(graph, t.itinerary, lang),
        )
        for t in trips
    ]
