from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

from src.app.ports.output import ITrafficProvider
from src.domain.exceptions import FeedError
from src.domain.models import GeoPoint, TrafficSegment

from .operator_api import env_timeout_s, parse_headers, route_code


@dataclass(slots=True)
class HttpTrafficProvider(ITrafficProvider):
    """Fetches per-segment traffic levels for a route direction.

    Env vars:
      - TRAFFIC_FEED_URL: endpoint accepting the form-encoded route query
      - OPERATOR_API_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - OPERATOR_API_TIMEOUT_S: request timeout (default 10)

    Notes:
      - If URL is not configured, returns no segments.
      - Transport and HTTP errors are raised as FeedError.
    """

    url: str | None = None
    headers_raw: str | None = None
    timeout_s: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("TRAFFIC_FEED_URL")
        if self.headers_raw is None:
            self.headers_raw = os.getenv("OPERATOR_API_HEADERS")
        if self.timeout_s is None:
            self.timeout_s = env_timeout_s()

    async def fetch_segments(
        self, *, route_name: str, direction: str
    ) -> tuple[TrafficSegment, ...]:
        if not self.url:
            return ()

        form = {
            "lang": "zh_tw",
            "routeCode": route_code(route_name),
            "direction": direction,
            "indexType": "00",
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
            raise FeedError("traffic", f"{route_name}/{direction}: {exc}") from exc

        return parse_traffic_payload(payload)


def _level(item: dict[str, Any]) -> int:
    raw = item.get("newRouteTraffic") or item.get("routeTraffic")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


def _path(raw: Any) -> tuple[GeoPoint, ...]:
    if not isinstance(raw, str):
        return ()
    points: list[GeoPoint] = []
    for pair in raw.split(";"):
        if "," not in pair:
            continue
        lon, lat = pair.split(",", 1)
        point = GeoPoint.maybe(lat.strip(), lon.strip())
        if point is not None:
            points.append(point)
    return tuple(points)


def parse_traffic_payload(payload: Any) -> tuple[TrafficSegment, ...]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        return ()

    segments: list[TrafficSegment] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        station = item.get("stationCode") or item.get("stopCode") or item.get("staCode")
        segments.append(
            TrafficSegment(
                level=_level(item),
                path=_path(item.get("routeCoordinates")),
                station_code=str(station) if station else None,
            )
        )
    return tuple(segments)
