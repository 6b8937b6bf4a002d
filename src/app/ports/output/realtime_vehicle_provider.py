from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import RouteVehicleSnapshot


class ILiveVehicleProvider(ABC):
    """Port for "which vehicles are at which stop" of a route direction.

    `route_type` is an operator discriminator that cannot be known up front;
    callers try several values.
    """

    @abstractmethod
    async def fetch_route_vehicles(
        self, *, route_name: str, direction: str, route_type: str
    ) -> RouteVehicleSnapshot | None:
        raise NotImplementedError
