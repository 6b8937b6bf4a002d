from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import get_arrival_service, get_itinerary_service
from src.adapters.api.schemas.itineraries import GeoPointSchema
from src.adapters.api.schemas.stops import (
    ApproachingVehicleSchema,
    RouteArrivalSchema,
    StopArrivalsSchema,
    StopSchema,
)
from src.app.services.arrival_service import ArrivalService
from src.app.services.itinerary_service import ItineraryService
from src.domain.models import GeoPoint, RouteArrival, Stop

router = APIRouter(prefix="/stops", tags=["stops"])


def _stop_to_schema(
    stop: Stop, lang: str | None = None, distance_m: float | None = None
) -> StopSchema:
    return StopSchema(
        stop_id=stop.id,
        name=stop.display_name(lang),
        names=dict(stop.names),
        location=(
            GeoPointSchema(lat=stop.location.lat, lon=stop.location.lon)
            if stop.location
            else None
        ),
        routes=list(stop.route_ids),
        distance_m=round(distance_m, 1) if distance_m is not None else None,
    )


def arrival_to_schema(arrival: RouteArrival) -> RouteArrivalSchema:
    estimate = arrival.estimate
    return RouteArrivalSchema(
        route_name=arrival.route_name,
        direction=arrival.direction,
        status=arrival.status.value,
        target_index=arrival.target_index,
        total_stops=arrival.total_stops,
        destination_stop_id=arrival.destination_stop_id,
        min_stops_away=estimate.min_stops_away,
        min_eta_min=estimate.min_eta_min,
        vehicle_at_stop=estimate.vehicle_at_target,
        buses=[
            ApproachingVehicleSchema(
                plate=v.plate,
                stops_away=v.stops_away,
                eta_min=v.eta_min,
                distance_m=v.distance_m,
                current_stop_id=v.current_stop_id,
                en_route=v.en_route,
            )
            for v in arrival.buses
        ],
        approaching_count=len(estimate.approaching),
    )


@router.get("/search", response_model=list[StopSchema])
def search_stops(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    lang: str | None = None,
    service: ItineraryService = Depends(get_itinerary_service),
) -> list[StopSchema]:
    return [_stop_to_schema(s, lang) for s in service.search_stops(q, limit=limit)]


@router.get("/nearby", response_model=list[StopSchema])
def nearby_stops(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    radius_m: float = Query(500.0, gt=0.0, le=5000.0),
    lang: str | None = None,
    service: ItineraryService = Depends(get_itinerary_service),
) -> list[StopSchema]:
    found = service.nearby_stops(GeoPoint(lat=lat, lon=lon), radius_m=radius_m)
    return [_stop_to_schema(s, lang, distance_m=d) for d, s in found]


@router.get("/nearest", response_model=StopSchema)
def nearest_stop(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    lang: str | None = None,
    service: ItineraryService = Depends(get_itinerary_service),
) -> StopSchema:
    found = service.nearest_stop(GeoPoint(lat=lat, lon=lon))
    if found is None:
        raise HTTPException(status_code=404, detail="No stops with coordinates")
    distance, stop = found
    return _stop_to_schema(stop, lang, distance_m=distance)


@router.get("/{stop_id}/arrivals", response_model=StopArrivalsSchema)
async def stop_arrivals(
    stop_id: str,
    service: ArrivalService = Depends(get_arrival_service),
) -> StopArrivalsSchema:
    if service.graph_repository.load_graph().stop(stop_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown stop: {stop_id}")

    arrivals = await service.stop_arrivals(stop_id=stop_id)
    return StopArrivalsSchema(
        stop_id=stop_id,
        routes={
            name: arrival_to_schema(a) if a is not None else None
            for name, a in arrivals.items()
        },
    )


@router.get("/{stop_id}/arrivals/{route_name}", response_model=RouteArrivalSchema)
async def route_arrivals(
    stop_id: str,
    route_name: str,
    direction: str = Query("0", pattern="^[01]$"),
    service: ArrivalService = Depends(get_arrival_service),
) -> RouteArrivalSchema:
    arrival = await service.route_arrivals(
        stop_id=stop_id, route_name=route_name, direction=direction
    )
    if arrival is None:
        raise HTTPException(
            status_code=404,
            detail=f"No live service for route {route_name} at {stop_id}",
        )
    return arrival_to_schema(arrival)
