from __future__ import annotations

import json
import logging

import pytest

from src.adapters.persistence.graph_document import parse_bus_graph, parse_bus_graph_bytes
from src.domain.exceptions import GraphDataError
from src.domain.models import GeoPoint

DATASET = {
    "stops": {
        "M11/1": {
            "name": "Ferry Terminal",
            "names": {"zh": "碼頭", "pt": "Terminal Marítimo"},
            "lat": 22.19,
            "lng": 113.55,
            "routes": ["3_0"],
        },
        "M12": {"name": "Praca", "lat": 22.195, "lon": 113.54},
        "T309/2": {"name": "Taipa Village", "lat": None, "lng": None},
    },
    "routes": {
        "3_0": {"stops": ["M11/1", "M12", "T309/2"]},
        "3_1": {"stops": ["T309/2", "M12", "M11/1"]},
        "26A_0": {"stops": ["M12", "T309/2"]},
        "MT1": {"baseRoute": "MT1", "direction": "1", "stops": ["M11/1", "M12"]},
    },
}


@pytest.fixture()
def graph():
    return parse_bus_graph(DATASET)


def test_routes_are_split_into_name_and_direction(graph) -> None:
    assert (graph.route("3_1").name, graph.route("3_1").direction) == ("3", "1")
    assert (graph.route("26A_0").name, graph.route("26A_0").direction) == ("26A", "0")
    assert (graph.route("MT1").name, graph.route("MT1").direction) == ("MT1", "1")


def test_stops_are_served_by_every_route_listing_them(graph) -> None:
    assert graph.routes_serving("M12") == ("3_0", "3_1", "26A_0", "MT1")
    assert graph.route_names_serving("M12") == ("3", "26A", "MT1")
    assert graph.routes_serving("unknown") == ()


def test_stop_coordinates_and_names(graph) -> None:
    terminal = graph.stop("M11/1")
    assert terminal.location == GeoPoint(lat=22.19, lon=113.55)
    assert terminal.name == "Ferry Terminal"
    assert terminal.display_name("zh") == "碼頭"
    assert terminal.display_name("pt-br") == "Terminal Marítimo"
    assert terminal.display_name("fr") == "Ferry Terminal"

    assert graph.stop("M12").location == GeoPoint(lat=22.195, lon=113.54)
    assert graph.stop("T309/2").location is None


def test_resolve_stop_tolerates_code_spelling(graph) -> None:
    assert graph.resolve_stop("M11/1").id == "M11/1"
    assert graph.resolve_stop("m11-1").id == "M11/1"
    assert graph.resolve_stop("T309_2").id == "T309/2"
    # Base-code fallback for an unknown pole.
    assert graph.resolve_stop("T309/9").id == "T309/2"
    assert graph.resolve_stop("Z1") is None


def test_direct_route_check(graph) -> None:
    assert graph.has_direct_route("M11/1", "T309/2")
    assert not graph.has_direct_route("M11/1", "unknown")


def test_search_matches_ids_and_all_names(graph) -> None:
    assert [s.id for s in graph.search_stops("m12")] == ["M12"]
    assert [s.id for s in graph.search_stops("marítimo")] == ["M11/1"]
    assert [s.id for s in graph.search_stops("a", limit=2)] == ["M11/1", "M12"]
    assert graph.search_stops("   ") == []


def test_parse_from_bytes() -> None:
    graph = parse_bus_graph_bytes(json.dumps(DATASET).encode("utf-8"))
    assert len(graph.stops_by_id) == 3
    assert len(graph.routes_by_id) == 4


@pytest.mark.parametrize(
    "body",
    [b"not json", b"[]", b'{"stops": {}}', b'{"stops": {}, "routes": {"1_0": 3}}'],
)
def test_malformed_dataset_raises(body: bytes) -> None:
    with pytest.raises(GraphDataError):
        parse_bus_graph_bytes(body)


def test_route_visiting_a_stop_twice_keeps_first_visit(caplog) -> None:
    doc = {
        "stops": {},
        "routes": {"1_0": {"stops": ["A", "B", "A"]}, "2_0": {"stops": ["B", "C"]}},
    }
    with caplog.at_level(logging.WARNING):
        graph = parse_bus_graph(doc)

    assert graph.route("1_0").stop_ids == ("A", "B")
    assert graph.route("2_0").stop_ids == ("B", "C")
    assert "1_0" in caplog.text


def test_null_lng_falls_back_to_lon() -> None:
    graph = parse_bus_graph(
        {
            "stops": {"A": {"lat": 22.1, "lng": None, "lon": 113.5}},
            "routes": {"1_0": {"stops": ["A"]}},
        }
    )
    assert graph.stop("A").location == GeoPoint(lat=22.1, lon=113.5)


def test_stops_only_known_from_routes_get_placeholder_names() -> None:
    graph = parse_bus_graph({"stops": {}, "routes": {"1_0": {"stops": ["A", "B"]}}})

    assert graph.stop("A").name == "A"
    assert graph.stop("A").location is None
    assert graph.stop("A").route_ids == ("1_0",)
