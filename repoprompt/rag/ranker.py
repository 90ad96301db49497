"""Cosine-similarity ranking of chunks against a query embedding."""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from ..errors import EmbeddingError
from ..logging import get_logger
from ..models import Chunk, RankedChunk
from ..progress import LoggingProgress, ProgressSink
from ..selection.selector import clamp_limit
from .constants import DEFAULT_TOP_K, MAX_TOP_K, MIN_TOP_K, PROGRESS_EVERY
from .embedder import EmbeddingSource


def cosine_similarity(left: Sequence[float], right: Sequence[float]) -> float:
    """Return the cosine similarity of two vectors.

    Zero-norm or differently sized vectors are incomparable and score 0.0.
    """
    if len(left) != len(right):
        return 0.0
    dot = 0.0
    norm_left = 0.0
    norm_right = 0.0
    for a, b in zip(left, right):
        dot += a * b
        norm_left += a * a
        norm_right += b * b
    if norm_left == 0 or norm_right == 0:
        return 0.0
    return dot / (math.sqrt(norm_left) * math.sqrt(norm_right))


def clamp_top_k(value: Any) -> int:
    return clamp_limit(value, lower=MIN_TOP_K, upper=MAX_TOP_K, default=DEFAULT_TOP_K)


@dataclass
class RankingOutcome:
    """Ranked chunks plus counters describing what was dropped."""

    ranked: List[RankedChunk]
    embedded: int
    failed: List[str] = field(default_factory=list)


class EmbeddingRanker:
    """Embeds chunks one after another and keeps the ``top_k`` most similar.

    Embedding is sequential by default so a single local inference server is never
    flooded. ``max_workers`` > 1 enables a small thread pool; results keep chunk
    order either way.
    """

    def __init__(
        self,
        embedder: EmbeddingSource,
        *,
        top_k: int = DEFAULT_TOP_K,
        max_workers: int = 1,
        progress: ProgressSink | None = None,
    ) -> None:
        self.embedder = embedder
        self.top_k = clamp_top_k(top_k)
        self.max_workers = max(1, int(max_workers))
        self.progress = progress or LoggingProgress()
        self.logger = get_logger("rag.ranker")

    def rank(self, chunks: Sequence[Chunk], query: str, top_k: Optional[int] = None) -> List[RankedChunk]:
        return self.rank_detailed(chunks, query, top_k=top_k).ranked

    def rank_detailed(
        self,
        chunks: Sequence[Chunk],
        query: str,
        *,
        top_k: Optional[int] = None,
    ) -> RankingOutcome:
        limit = clamp_top_k(top_k if top_k is not None else self.top_k)

        self.progress.report("Generating embedding for your query...")
        try:
            query_vector = self.embedder.embed(query)
        except RuntimeError as exc:
            raise EmbeddingError(
                f"Failed to embed query. Make sure the embedding model is available. Details: {exc}"
            ) from exc

        vectors = self._embed_chunks(chunks)

        self.progress.report("Calculating semantic similarity...")
        scored: List[Tuple[float, Chunk]] = []
        failed: List[str] = []
        for chunk, vector in zip(chunks, vectors):
            if vector is None:
                failed.append(chunk.label)
                continue
            chunk.embedding = vector
            chunk.score = cosine_similarity(query_vector, vector)
            scored.append((chunk.score, chunk))

        scored.sort(key=lambda item: -item[0])
        ranked = [
            RankedChunk(
                source_path=chunk.source_path,
                part_index=chunk.part_index,
                content=chunk.content,
                score=score,
            )
            for score, chunk in scored[:limit]
        ]
        if failed:
            self.logger.warning("Dropped %d of %d chunks that failed to embed", len(failed), len(chunks))
        return RankingOutcome(ranked=ranked, embedded=len(scored), failed=failed)

    def _embed_chunks(self, chunks: Sequence[Chunk]) -> List[Optional[List[float]]]:
        total = len(chunks)
        if self.max_workers == 1:
            vectors: List[Optional[List[float]]] = []
            for position, chunk in enumerate(chunks, start=1):
                self._report_progress(position, total)
                vectors.append(self._embed_one(chunk))
            return vectors

        self.progress.report(f"Embedding code chunks... ({total} chunks, {self.max_workers} workers)")
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(self._embed_one, chunks))

    def _embed_one(self, chunk: Chunk) -> Optional[List[float]]:
        try:
            return self.embedder.embed(chunk.content)
        except RuntimeError as exc:
            self.logger.warning("Failed to embed chunk from %s: %s", chunk.label, exc)
            return None

    def _report_progress(self, position: int, total: int) -> None:
        if position == 1 or position % PROGRESS_EVERY == 0:
            self.progress.report(f"Embedding code chunks... ({position}/{total})")


__all__ = ["EmbeddingRanker", "RankingOutcome", "clamp_top_k", "cosine_similarity"]
