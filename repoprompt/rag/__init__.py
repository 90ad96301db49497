"""Chunk-level retrieval: chunking, embedding and similarity ranking."""

from .chunker import LineChunker, chunk_text
from .embedder import EmbeddingSource, HashingEmbedder, OllamaEmbedder
from .ranker import EmbeddingRanker, RankingOutcome, clamp_top_k, cosine_similarity

__all__ = [
    "EmbeddingRanker",
    "EmbeddingSource",
    "HashingEmbedder",
    "LineChunker",
    "OllamaEmbedder",
    "RankingOutcome",
    "chunk_text",
    "clamp_top_k",
    "cosine_similarity",
]
