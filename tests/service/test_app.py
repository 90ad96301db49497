"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from repoprompt.config import AppConfig
from repoprompt.errors import GenerationError, InvalidRequestError, InvalidTargetError, TreeSourceError
from repoprompt.models import PipelineResult
from repoprompt.pipeline import GenerationRequest, Pipeline
from repoprompt.progress import RecordingProgress
from repoprompt.service import create_app
from repoprompt.stores import SnapshotCache
from tests._fixtures.fake_source import FakeSource


class _StubPipeline:
    def __init__(self) -> None:
        self.requests: List[GenerationRequest] = []
        self.error: Exception | None = None

    def run(self, request: GenerationRequest) -> PipelineResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return PipelineResult(
            document="doc",
            output="out",
            is_truncated=True,
            selected_files=["src/index.ts"],
            failed_files=["src/broken.ts"],
            failed_chunks=2,
        )

    def ollama_status(self) -> Tuple[bool, str, List[str]]:
        return True, "http://localhost:11434", ["llama3:latest"]


@pytest.fixture
def stub() -> _StubPipeline:
    return _StubPipeline()


@pytest.fixture
def client(stub: _StubPipeline) -> TestClient:
    return TestClient(create_app(lambda: stub))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_endpoint_maps_request_and_result(client: TestClient, stub: _StubPipeline) -> None:
    response = client.post(
        "/generate",
        json={
            "target": "https://github.com/acme/widgets",
            "max_files": 500,
            "use_rag": True,
            "rag_query": "auth",
            "top_k": 3,
            "analyze_issues": True,
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "document": "doc",
        "output": "out",
        "is_truncated": True,
        "selected_files": ["src/index.ts"],
        "failed_files": ["src/broken.ts"],
        "failed_chunks": 2,
    }
    request = stub.requests[0]
    assert request.target == "https://github.com/acme/widgets"
    assert request.max_files == 500
    assert request.rag_query == "auth"
    assert request.top_k == 3
    assert request.analyze_issues is True


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (InvalidTargetError("Invalid GitHub URL format."), 400),
        (InvalidRequestError("A RAG query is required."), 400),
        (TreeSourceError("Repository not found."), 502),
        (GenerationError("Gemini API key is missing."), 502),
    ],
)
def test_generate_endpoint_maps_errors(
    client: TestClient, stub: _StubPipeline, error: Exception, status: int
) -> None:
    stub.error = error
    response = client.post("/generate", json={"target": "x"})
    assert response.status_code == status
    assert response.json() == {"detail": str(error)}


def test_generate_requires_target(client: TestClient) -> None:
    response = client.post("/generate", json={})
    assert response.status_code == 422


def test_ollama_models_endpoint(client: TestClient) -> None:
    response = client.get("/ollama/models")
    assert response.status_code == 200
    assert response.json() == {
        "connected": True,
        "base_url": "http://localhost:11434",
        "models": ["llama3:latest"],
    }


def test_pipelines_share_injected_cache() -> None:
    source = FakeSource({"src/index.ts": "export {}"})
    config = AppConfig(root=Path("."))
    cache = SnapshotCache()

    def factory() -> Pipeline:
        return Pipeline(config, source_factory=lambda request: source, cache=cache, progress=RecordingProgress())

    client = TestClient(create_app(factory))
    first = client.post("/generate", json={"target": "fake"})
    second = client.post("/generate", json={"target": "fake"})

    assert first.status_code == second.status_code == 200
    assert first.json()["document"] == second.json()["document"]
    assert source.describe_calls == 1


def test_default_factory_reads_local_repository(repo_builder, tmp_path: Path) -> None:
    repo_builder.write({"README.md": "# Demo", "app/server.py": "run()"})
    client = TestClient(create_app(config=AppConfig(root=tmp_path)))

    response = client.post("/generate", json={"target": str(repo_builder.path())})
    assert response.status_code == 200
    assert response.json()["selected_files"] == ["app/server.py"]

    missing = client.post("/generate", json={"target": str(tmp_path / "missing")})
    assert missing.status_code == 400
    assert "Repository path not found" in missing.json()["detail"]
