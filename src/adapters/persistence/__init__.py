from .local_graph_repository import LocalGraphRepository
from .s3_graph_repository import S3GraphRepository

__all__ = [
    "LocalGraphRepository",
    "S3GraphRepository",
]
