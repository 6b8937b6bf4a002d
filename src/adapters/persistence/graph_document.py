from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from src.domain.exceptions import GraphDataError
from src.domain.models import BusGraph, BusRoute, GeoPoint, Stop

logger = logging.getLogger(__name__)


def _split_route_id(route_id: str) -> tuple[str, str]:
    # "26A_0" -> ("26A", "0"); ids without a suffix default to direction "0".
    name, sep, direction = route_id.rpartition("_")
    if not sep or not name:
        return route_id, "0"
    return name, direction


def _names(raw: Mapping[str, Any], stop_id: str) -> dict[str, str]:
    names: dict[str, str] = {}
    default = raw.get("name")
    if isinstance(default, str) and default.strip():
        names["default"] = default.strip()
    extra = raw.get("names")
    if isinstance(extra, Mapping):
        for lang, value in extra.items():
            if isinstance(value, str) and value.strip():
                names[str(lang)] = value.strip()
    if not names:
        names["default"] = stop_id
    return names


def parse_bus_graph(doc: Mapping[str, Any]) -> BusGraph:
    """Build a BusGraph from the static dataset document.

    Expected shape::

        {"stops":  {"<id>": {"name", "names"?, "lat"?, "lng"|"lon"?, "routes"?}},
         "routes": {"<name>_<dir>": {"baseRoute"?, "direction"?, "stops": [...]}}}
    """

    raw_stops = doc.get("stops")
    raw_routes = doc.get("routes")
    if not isinstance(raw_stops, Mapping) or not isinstance(raw_routes, Mapping):
        raise GraphDataError("Dataset must contain 'stops' and 'routes' objects")

    routes_by_id: dict[str, BusRoute] = {}
    for route_id, raw in raw_routes.items():
        if not isinstance(raw, Mapping):
            raise GraphDataError(f"Route {route_id} is not an object")
        name, direction = _split_route_id(str(route_id))
        listed = [str(s) for s in (raw.get("stops") or ())]
        stop_ids = tuple(dict.fromkeys(listed))
        if len(stop_ids) != len(listed):
            # Circular routes; index_of needs one position per stop.
            logger.warning(
                "Route %s lists %d repeated stop(s); keeping first visits",
                route_id,
                len(listed) - len(stop_ids),
            )
        routes_by_id[str(route_id)] = BusRoute(
            id=str(route_id),
            name=str(raw.get("baseRoute") or name),
            direction=str(raw.get("direction") or direction),
            stop_ids=stop_ids,
        )

    # A stop is served by every route it declares that exists, plus every
    # route that actually lists it.
    serving: dict[str, list[str]] = {}
    for stop_id, raw in raw_stops.items():
        declared = raw.get("routes") if isinstance(raw, Mapping) else None
        serving[str(stop_id)] = [
            str(r) for r in (declared or ()) if str(r) in routes_by_id
        ]
    for route in routes_by_id.values():
        for stop_id in route.stop_ids:
            ids = serving.setdefault(stop_id, [])
            if route.id not in ids:
                ids.append(route.id)

    stops_by_id: dict[str, Stop] = {}
    for stop_id, route_ids in serving.items():
        raw = raw_stops.get(stop_id)
        if not isinstance(raw, Mapping):
            raw = {}
        lon = raw.get("lng")
        if lon is None:
            lon = raw.get("lon")
        stops_by_id[stop_id] = Stop(
            id=stop_id,
            names=_names(raw, stop_id),
            location=GeoPoint.maybe(raw.get("lat"), lon),
            route_ids=tuple(dict.fromkeys(route_ids)),
        )

    missing_geo = sum(1 for s in stops_by_id.values() if s.location is None)
    logger.info(
        "Loaded bus graph: %d stops (%d without coordinates), %d routes",
        len(stops_by_id),
        missing_geo,
        len(routes_by_id),
    )
    return BusGraph(stops_by_id=stops_by_id, routes_by_id=routes_by_id)


def parse_bus_graph_bytes(body: bytes) -> BusGraph:
    try:
        doc = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GraphDataError(f"Dataset is not valid JSON: {exc}") from exc
    if not isinstance(doc, Mapping):
        raise GraphDataError("Dataset root must be a JSON object")
    return parse_bus_graph(doc)
