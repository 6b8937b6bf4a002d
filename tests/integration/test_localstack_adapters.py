from __future__ import annotations

import json
import os
from uuid import uuid4

import pytest

from src.adapters.aws import s3_client
from src.adapters.persistence.s3_graph_repository import S3GraphRepository


@pytest.mark.integration
def test_s3_graph_repository_loads_dataset(require_localstack: str) -> None:
    bucket = "bustrack-test-graphs"
    key = f"graphs-test-{uuid4()}/bus_data.json"

    s3 = s3_client()
    try:
        s3.create_bucket(
            Bucket=bucket,
            CreateBucketConfiguration={
                "LocationConstraint": os.environ.get("AWS_REGION", "eu-west-1")
            },
        )
    except s3.exceptions.BucketAlreadyOwnedByYou:
        pass

    dataset = {
        "stops": {
            "M1": {"name": "Ferry Terminal", "lat": 22.19, "lng": 113.55},
            "M2": {"name": "Praca", "lat": 22.195, "lng": 113.54},
        },
        "routes": {"3_0": {"stops": ["M1", "M2"]}},
    }
    s3.put_object(Bucket=bucket, Key=key, Body=json.dumps(dataset).encode("utf-8"))

    repo = S3GraphRepository(bucket=bucket, key=key)
    graph = repo.load_graph()

    assert set(graph.stops_by_id) == {"M1", "M2"}
    assert graph.route("3_0").stop_ids == ("M1", "M2")

    # Cached: a later load does not hit S3 again.
    s3.delete_object(Bucket=bucket, Key=key)
    assert repo.load_graph() is graph
