from .geo import GeoPoint
from .graph import BusGraph
from .realtime import (
    ApproachingVehicle,
    ArrivalEstimate,
    ArrivalStatus,
    LiveVehicleAtStop,
    RouteArrival,
    RouteVehicleSnapshot,
    VehicleStatus,
)
from .route import BusRoute, Itinerary, RouteLeg
from .stop import Stop
from .traffic import TrafficSegment

__all__ = [
    "ApproachingVehicle",
    "ArrivalEstimate",
    "ArrivalStatus",
    "BusGraph",
    "BusRoute",
    "GeoPoint",
    "Itinerary",
    "LiveVehicleAtStop",
    "RouteArrival",
    "RouteLeg",
    "RouteVehicleSnapshot",
    "Stop",
    "TrafficSegment",
    "VehicleStatus",
]
