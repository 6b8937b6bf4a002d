from __future__ import annotations

import os
from dataclasses import dataclass

from src.adapters.aws import s3_client
from src.app.ports.output import IGraphRepository
from src.domain.models import BusGraph

from .graph_document import parse_bus_graph_bytes


@dataclass(slots=True)
class S3GraphRepository(IGraphRepository):
    """Bus graph dataset stored as a JSON object in S3.

    Env vars:
      - S3_BUCKET: bucket name
      - S3_GRAPH_KEY: object key (e.g. graphs/bus_data.json)
      - ENDPOINT_URL: preferred LocalStack endpoint (e.g. http://localhost:4566)
      - AWS_REGION: defaults to eu-west-1
    """

    bucket: str | None = None
    key: str | None = None

    _graph: BusGraph | None = None

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("S3_BUCKET")
        if not value:
            raise RuntimeError("Missing S3_BUCKET")
        return value

    def _key(self) -> str:
        value = self.key or os.getenv("S3_GRAPH_KEY")
        if not value:
            raise RuntimeError("Missing S3_GRAPH_KEY")
        return value

    def load_graph(self) -> BusGraph:
        if self._graph is not None:
            return self._graph

        s3 = s3_client()
        obj = s3.get_object(Bucket=self._bucket(), Key=self._key())
        body = obj["Body"].read()

        self._graph = parse_bus_graph_bytes(body)
        return self._graph
