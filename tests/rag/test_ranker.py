"""Tests for cosine similarity ranking of chunks."""

from __future__ import annotations

import json
import math
from typing import List

import pytest

from repoprompt.errors import EmbeddingError
from repoprompt.llm import OllamaClient
from repoprompt.models import Chunk
from repoprompt.progress import RecordingProgress
from repoprompt.rag import EmbeddingRanker, OllamaEmbedder, clamp_top_k, cosine_similarity
from tests._fixtures.http import FakeUrlopen, TruncatedResponse


class _IndexEmbedder:
    """Embeds ``chunk-<i>`` so that lower indexes are closer to the query."""

    def __init__(self, failing: set[int] | None = None) -> None:
        self.failing = failing or set()
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if text == "query":
            return [1.0, 0.0]
        index = int(text.split("-")[1])
        if index in self.failing:
            raise EmbeddingError(f"model crashed on {text}")
        return [1.0, index / 10]


def _chunks(count: int) -> List[Chunk]:
    return [Chunk(source_path=f"file{i}.py", part_index=0, content=f"chunk-{i}") for i in range(count)]


def test_failed_chunks_are_dropped_and_top_k_returned() -> None:
    embedder = _IndexEmbedder(failing={2, 7, 11})
    ranker = EmbeddingRanker(embedder, progress=RecordingProgress())

    outcome = ranker.rank_detailed(_chunks(20), "query", top_k=10)

    assert outcome.embedded == 17
    assert len(outcome.failed) == 3
    assert len(outcome.ranked) == 10
    scores = [item.score for item in outcome.ranked]
    assert scores == sorted(scores, reverse=True)
    assert [item.content for item in outcome.ranked[:3]] == ["chunk-0", "chunk-1", "chunk-3"]


def test_query_embedding_failure_is_fatal() -> None:
    class _Broken:
        def embed(self, text: str) -> List[float]:
            raise EmbeddingError("connection refused")

    ranker = EmbeddingRanker(_Broken(), progress=RecordingProgress())
    with pytest.raises(EmbeddingError, match="Failed to embed query"):
        ranker.rank(_chunks(3), "query")


def test_zero_vector_scores_zero() -> None:
    class _Zero:
        def embed(self, text: str) -> List[float]:
            return [1.0, 0.0] if text == "query" else [0.0, 0.0]

    ranked = EmbeddingRanker(_Zero(), progress=RecordingProgress()).rank(_chunks(2), "query")
    assert [item.score for item in ranked] == [0.0, 0.0]


def test_no_chunks_yield_empty_ranking() -> None:
    ranker = EmbeddingRanker(_IndexEmbedder(), progress=RecordingProgress())
    assert ranker.rank([], "query") == []


def test_chunks_are_embedded_in_order_with_progress() -> None:
    embedder = _IndexEmbedder()
    progress = RecordingProgress()
    EmbeddingRanker(embedder, progress=progress).rank(_chunks(10), "query", top_k=3)

    assert embedder.calls == ["query"] + [f"chunk-{i}" for i in range(10)]
    assert progress.messages == [
        "Generating embedding for your query...",
        "Embedding code chunks... (1/10)",
        "Embedding code chunks... (5/10)",
        "Embedding code chunks... (10/10)",
        "Calculating semantic similarity...",
    ]


def test_worker_pool_matches_sequential_ranking() -> None:
    chunks = _chunks(12)
    sequential = EmbeddingRanker(_IndexEmbedder(failing={4}), progress=RecordingProgress()).rank(chunks, "query")
    pooled = EmbeddingRanker(
        _IndexEmbedder(failing={4}), max_workers=4, progress=RecordingProgress()
    ).rank(_chunks(12), "query")
    assert [item.content for item in pooled] == [item.content for item in sequential]


def test_ranked_chunk_annotation() -> None:
    ranked = EmbeddingRanker(_IndexEmbedder(), progress=RecordingProgress()).rank(_chunks(1), "query")
    assert ranked[0].annotated_content == "// RAG Semantic Similarity Score: 100.0%\nchunk-0"
    assert ranked[0].label == "file0.py (Part 1)"


def test_top_k_is_clamped() -> None:
    assert clamp_top_k(0) == 1
    assert clamp_top_k(500) == 50
    assert clamp_top_k(None) == 10


def test_cosine_similarity_bounds() -> None:
    assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    assert cosine_similarity([1.0], [1.0, 0.0]) == 0.0
    value = cosine_similarity([0.3, -0.4, 0.5], [0.9, 0.1, -0.2])
    assert -1.0 <= value <= 1.0
    assert not math.isnan(value)


def test_cut_off_chunk_embedding_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    def _respond(request) -> object:
        prompt = json.loads(request.data.decode("utf-8"))["prompt"]
        if prompt == "chunk-1":
            return TruncatedResponse()
        return {"embedding": [1.0, 0.5]}

    monkeypatch.setattr("repoprompt.llm.ollama.urlopen", FakeUrlopen({"/api/embeddings": _respond}))
    embedder = OllamaEmbedder(OllamaClient(), model="nomic-embed-text")
    ranker = EmbeddingRanker(embedder, progress=RecordingProgress())

    outcome = ranker.rank_detailed(_chunks(3), "query")

    assert outcome.embedded == 2
    assert outcome.failed == ["file1.py (Part 1)"]
    assert [item.content for item in outcome.ranked] == ["chunk-0", "chunk-2"]
