from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import BusGraph


class IGraphRepository(ABC):
    """Persistence port for the static stop/route graph."""

    @abstractmethod
    def load_graph(self) -> BusGraph:
        """Load the graph once and return the same instance on later calls."""
