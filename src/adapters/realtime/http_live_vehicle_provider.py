from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

from src.app.ports.output import ILiveVehicleProvider
from src.domain.exceptions import FeedError
from src.domain.models import LiveVehicleAtStop, RouteVehicleSnapshot, VehicleStatus

from .operator_api import env_timeout_s, parse_headers

# Operator status flag for a bus standing at the stop; anything else has left it.
AT_STOP_FLAG = "1"


@dataclass(slots=True)
class HttpLiveVehicleProvider(ILiveVehicleProvider):
    """Fetches the "buses at each stop" list for a route direction.

    Env vars:
      - LIVE_VEHICLE_FEED_URL: endpoint accepting the form-encoded route query
      - OPERATOR_API_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - OPERATOR_API_TIMEOUT_S: request timeout (default 10)
    """

    url: str | None = None
    headers_raw: str | None = None
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("LIVE_VEHICLE_FEED_URL")
        if self.headers_raw is None:
            self.headers_raw = os.getenv("OPERATOR_API_HEADERS")
        if self.timeout_s is None:
            self.timeout_s = env_timeout_s()

    async def fetch_route_vehicles(
        self, *, route_name: str, direction: str, route_type: str
    ) -> RouteVehicleSnapshot | None:
        if not self.url:
            return None

        form = {
            "action": "dy",
            "routeName": route_name,
            "dir": direction,
            "lang": "zh-tw",
            "routeType": route_type,
            "device": "web",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.post(
                    self.url, data=form, headers=parse_headers(self.headers_raw)
                )
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise FeedError(
                "vehicles", f"{route_name}/{direction} type {route_type}: {exc}"
            ) from exc

        return parse_route_vehicles(
            payload, route_name=route_name, direction=direction, route_type=route_type
        )


def _speed(raw: Any) -> float | None:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def parse_route_vehicles(
    payload: Any, *, route_name: str, direction: str, route_type: str
) -> RouteVehicleSnapshot | None:
    """Decode a feed response; None when it carries no stop list."""

    data = payload.get("data") if isinstance(payload, dict) else None
    route_info = data.get("routeInfo") if isinstance(data, dict) else None
    if not isinstance(route_info, list) or not route_info:
        return None

    stop_ids: list[str] = []
    vehicles_by_stop_index: dict[int, tuple[LiveVehicleAtStop, ...]] = {}
    for i, stop in enumerate(route_info):
        if not isinstance(stop, dict):
            stop = {}
        code = str(stop.get("staCode") or "")
        stop_ids.append(code)

        vehicles: list[LiveVehicleAtStop] = []
        for bus in stop.get("busInfo") or ():
            if not isinstance(bus, dict) or not bus.get("busPlate"):
                continue
            status = (
                VehicleStatus.AT_STOP
                if str(bus.get("status")) == AT_STOP_FLAG
                else VehicleStatus.DEPARTED
            )
            vehicles.append(
                LiveVehicleAtStop(
                    plate=str(bus["busPlate"]),
                    stop_id=code,
                    status=status,
                    speed_kmh=_speed(bus.get("speed")),
                )
            )
        if vehicles:
            vehicles_by_stop_index[i] = tuple(vehicles)

    return RouteVehicleSnapshot(
        route_name=route_name,
        direction=direction,
        route_type=route_type,
        stop_ids=tuple(stop_ids),
        vehicles_by_stop_index=vehicles_by_stop_index,
    )
