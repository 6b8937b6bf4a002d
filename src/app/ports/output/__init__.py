from .graph_repository import IGraphRepository
from .realtime_vehicle_provider import ILiveVehicleProvider
from .traffic_provider import ITrafficProvider

__all__ = [
    "IGraphRepository",
    "ILiveVehicleProvider",
    "ITrafficProvider",
]
