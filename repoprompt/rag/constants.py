"""Constants for chunking and similarity ranking."""

from __future__ import annotations

DEFAULT_LINES_PER_CHUNK = 30
DEFAULT_OVERLAP_LINES = 5

# Roughly 2000 tokens; keeps single-line blobs (minified code, base64) inside the
# context window of small embedding models.
MAX_CHUNK_CHARS = 8000

DEFAULT_TOP_K = 10
MIN_TOP_K = 1
MAX_TOP_K = 50

DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"

# Progress is reported for the first chunk and then every N chunks.
PROGRESS_EVERY = 5
