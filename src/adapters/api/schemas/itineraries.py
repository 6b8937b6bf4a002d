from __future__ import annotations

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class RouteLegSchema(BaseModel):
    route_id: str
    route_name: str
    direction: str
    from_stop_id: str
    to_stop_id: str
    from_stop_name: str
    to_stop_name: str
    from_index: int
    to_index: int
    stop_count: int
    stops: list[str]
    duration_min: int


class ItinerarySchema(BaseModel):
    legs: list[RouteLegSchema] = []
    total_stops: int
    transfer_count: int
    total_duration_min: int


class ItinerariesResponseSchema(BaseModel):
    from_stop: str
    to_stop: str
    traffic_applied: bool
    itineraries: list[ItinerarySchema]


class TripRequestSchema(BaseModel):
    origin: GeoPointSchema
    destination: GeoPointSchema


class TripSchema(BaseModel):
    board_stop_id: str
    alight_stop_id: str
    walk_to_stop_m: float
    walk_from_stop_m: float
    walk_min: int
    total_duration_min: int
    itinerary: ItinerarySchema
