from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import TrafficSegment


class ITrafficProvider(ABC):
    """Port for live per-segment traffic along a route direction."""

    @abstractmethod
    async def fetch_segments(
        self, *, route_name: str, direction: str
    ) -> tuple[TrafficSegment, ...]:
        """Segments in physical order; empty when the feed has no data."""
