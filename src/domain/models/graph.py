from __future__ import annotations

from dataclasses import dataclass, field

from .route import BusRoute
from .stop import Stop, base_stop_code, normalize_stop_code


@dataclass(frozen=True, slots=True)
class BusGraph:
    """Read-only stop/route graph, built once from the static dataset.

    All lookups are plain dict accesses; the search algorithms rely on that.
    """

    stops_by_id: dict[str, Stop]
    routes_by_id: dict[str, BusRoute]

    _by_code: dict[str, str] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _by_base_code: dict[str, str] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        by_code: dict[str, str] = {}
        by_base: dict[str, str] = {}
        for stop_id in self.stops_by_id:
            by_code.setdefault(normalize_stop_code(stop_id), stop_id)
            by_base.setdefault(base_stop_code(stop_id), stop_id)
        object.__setattr__(self, "_by_code", by_code)
        object.__setattr__(self, "_by_base_code", by_base)

    def stop(self, stop_id: str) -> Stop | None:
        return self.stops_by_id.get(stop_id)

    def route(self, route_id: str) -> BusRoute | None:
        return self.routes_by_id.get(route_id)

    def routes_serving(self, stop_id: str) -> tuple[str, ...]:
        stop = self.stops_by_id.get(stop_id)
        return stop.route_ids if stop else ()

    def stops_of(self, route_id: str) -> tuple[str, ...]:
        route = self.routes_by_id.get(route_id)
        return route.stop_ids if route else ()

    def route_names_serving(self, stop_id: str) -> tuple[str, ...]:
        """Distinct base route names (direction dropped) serving a stop."""

        names: list[str] = []
        for route_id in self.routes_serving(stop_id):
            route = self.routes_by_id.get(route_id)
            name = route.name if route else route_id.split("_")[0]
            if name not in names:
                names.append(name)
        return tuple(names)

    def resolve_stop(self, code: str) -> Stop | None:
        """Find a stop by id, tolerating operator code spelling differences."""

        stop = self.stops_by_id.get(code)
        if stop is not None:
            return stop
        stop_id = self._by_code.get(normalize_stop_code(code))
        if stop_id is None:
            stop_id = self._by_base_code.get(base_stop_code(code))
        return self.stops_by_id.get(stop_id) if stop_id else None

    def has_direct_route(self, stop_a: str, stop_b: str) -> bool:
        b_routes = set(self.routes_serving(stop_b))
        return any(r in b_routes for r in self.routes_serving(stop_a))

    def search_stops(self, query: str, *, limit: int = 20) -> list[Stop]:
        """Case-insensitive substring match over ids and names in every language."""

        needle = (query or "").strip().casefold()
        if not needle:
            return []

        exact: list[Stop] = []
        partial: list[Stop] = []
        for stop in self.stops_by_id.values():
            if stop.id.casefold() == needle:
                exact.append(stop)
                continue
            haystack = [stop.id, *stop.names.values()]
            if any(needle in value.casefold() for value in haystack if value):
                partial.append(stop)

        return (exact + partial)[: max(0, limit)]
