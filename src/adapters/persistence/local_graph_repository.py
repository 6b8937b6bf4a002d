from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IGraphRepository
from src.domain.models import BusGraph

from .graph_document import parse_bus_graph_bytes


@dataclass(slots=True)
class LocalGraphRepository(IGraphRepository):
    """Loads the bus graph from a JSON file on disk.

    Env vars:
      - BUS_GRAPH_PATH: path to the dataset (default: data/bus_data.json)
    """

    path: str | Path | None = None

    _graph: BusGraph | None = None

    def _path(self) -> Path:
        value = self.path or os.getenv("BUS_GRAPH_PATH") or "data/bus_data.json"
        return Path(value)

    def load_graph(self) -> BusGraph:
        if self._graph is not None:
            return self._graph

        self._graph = parse_bus_graph_bytes(self._path().read_bytes())
        return self._graph
