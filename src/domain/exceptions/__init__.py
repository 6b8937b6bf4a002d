from .feeds import FeedError
from .routing import GraphDataError, NoPathFound, RoutingError

__all__ = ["FeedError", "GraphDataError", "NoPathFound", "RoutingError"]
