from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from src.adapters.api.schemas.itineraries import GeoPointSchema


class StopSchema(BaseModel):
    stop_id: str
    name: str
    names: dict[str, str] = {}
    location: GeoPointSchema | None = None
    routes: list[str] = []
    distance_m: float | None = None


class ApproachingVehicleSchema(BaseModel):
    plate: str
    stops_away: int
    eta_min: int
    distance_m: int
    current_stop_id: str | None = None
    en_route: bool = False


class RouteArrivalSchema(BaseModel):
    route_name: str
    direction: str
    status: Literal["arriving", "active", "no_approaching", "no_service"]
    target_index: int
    total_stops: int
    destination_stop_id: str | None = None
    min_stops_away: int | None = None
    min_eta_min: int | None = None
    vehicle_at_stop: bool = False
    buses: list[ApproachingVehicleSchema] = []
    approaching_count: int = 0


class StopArrivalsSchema(BaseModel):
    stop_id: str
    routes: dict[str, RouteArrivalSchema | None]
