"""Embedding sources for semantic chunk ranking."""

from __future__ import annotations

import math
import re
import zlib
from typing import List, Protocol

from ..llm.ollama import OllamaClient
from .constants import DEFAULT_EMBEDDING_MODEL

_WORD_PATTERN = re.compile(r"[A-Za-z0-9_]+")


class EmbeddingSource(Protocol):
    """Anything that turns text into a fixed-length float vector."""

    def embed(self, text: str) -> List[float]:
        """Return the embedding of ``text`` or raise ``EmbeddingError``."""


class OllamaEmbedder:
    """Embeds text with a model served by a local Ollama instance."""

    def __init__(self, client: OllamaClient, *, model: str = DEFAULT_EMBEDDING_MODEL) -> None:
        self.client = client
        self.model = model

    def embed(self, text: str) -> List[float]:
        return self.client.embed(text, model=self.model)


class HashingEmbedder:
    """Offline bag-of-words embedder using the hashing trick.

    Tokens are bucketed with CRC32 so vectors are stable across processes. Useful
    when no inference server is available; quality is lexical, not semantic.
    """

    def __init__(self, *, dimensions: int = 256) -> None:
        self.dimensions = max(8, dimensions)

    def embed(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        for token in _WORD_PATTERN.findall(text):
            bucket = zlib.crc32(token.lower().encode("utf-8")) % self.dimensions
            vector[bucket] += 1.0
        norm = math.sqrt(sum(value * value for value in vector))
        if not norm:
            return vector
        return [value / norm for value in vector]


__all__ = ["EmbeddingSource", "HashingEmbedder", "OllamaEmbedder"]
