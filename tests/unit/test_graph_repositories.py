from __future__ import annotations

import io
import json

import pytest

from src.adapters.persistence import LocalGraphRepository, S3GraphRepository
from src.adapters.persistence import s3_graph_repository as s3_module

DATASET = {
    "stops": {"M1": {"name": "Ferry Terminal", "lat": 22.19, "lng": 113.55}},
    "routes": {"3_0": {"stops": ["M1", "M2"]}},
}


def test_local_repository_reads_and_caches(tmp_path) -> None:
    path = tmp_path / "bus_data.json"
    path.write_text(json.dumps(DATASET), encoding="utf-8")

    repo = LocalGraphRepository(path=path)
    graph = repo.load_graph()

    assert set(graph.stops_by_id) == {"M1", "M2"}
    path.unlink()
    assert repo.load_graph() is graph


def test_local_repository_uses_env_path(tmp_path, monkeypatch) -> None:
    path = tmp_path / "other.json"
    path.write_text(json.dumps(DATASET), encoding="utf-8")
    monkeypatch.setenv("BUS_GRAPH_PATH", str(path))

    assert LocalGraphRepository().load_graph().route("3_0") is not None


def test_local_repository_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        LocalGraphRepository(path=tmp_path / "missing.json").load_graph()


class _FakeS3:
    def __init__(self, body: bytes) -> None:
        self.body = body
        self.calls: list[tuple[str, str]] = []

    def get_object(self, *, Bucket: str, Key: str):
        self.calls.append((Bucket, Key))
        return {"Body": io.BytesIO(self.body)}


def test_s3_repository_reads_configured_object(monkeypatch) -> None:
    fake = _FakeS3(json.dumps(DATASET).encode("utf-8"))
    monkeypatch.setattr(s3_module, "s3_client", lambda: fake)
    monkeypatch.setenv("S3_BUCKET", "graphs")
    monkeypatch.setenv("S3_GRAPH_KEY", "bus/bus_data.json")

    repo = S3GraphRepository()
    graph = repo.load_graph()
    repo.load_graph()

    assert graph.stop("M1").name == "Ferry Terminal"
    assert fake.calls == [("graphs", "bus/bus_data.json")]


def test_s3_repository_requires_bucket(monkeypatch) -> None:
    monkeypatch.setattr(s3_module, "s3_client", lambda: _FakeS3(b"{}"))
    monkeypatch.delenv("S3_BUCKET", raising=False)

    with pytest.raises(RuntimeError, match="S3_BUCKET"):
        S3GraphRepository(key="k").load_graph()
