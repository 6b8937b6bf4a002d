class RoutingError(Exception):
    """Base exception for route calculation failures."""


class NoPathFound(RoutingError):
    """Raised at the API edge when no itinerary exists for the given request."""


class GraphDataError(RoutingError):
    """Raised when the static stop/route dataset cannot be turned into a graph."""
