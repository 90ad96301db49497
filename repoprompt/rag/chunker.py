"""Overlapping line-window chunking for embedding."""

from __future__ import annotations

from typing import Iterable, Iterator, List

from ..models import Chunk, SourceFile
from .constants import DEFAULT_LINES_PER_CHUNK, DEFAULT_OVERLAP_LINES, MAX_CHUNK_CHARS


class LineChunker:
    """Splits text into fixed-size line windows that overlap by a few lines.

    Window ``i`` starts at line ``i * (lines_per_chunk - overlap_lines)``. A window
    longer than ``max_chars`` characters is cut into consecutive character slices.
    The chunker holds no state between calls.
    """

    def __init__(
        self,
        *,
        lines_per_chunk: int = DEFAULT_LINES_PER_CHUNK,
        overlap_lines: int = DEFAULT_OVERLAP_LINES,
        max_chars: int = MAX_CHUNK_CHARS,
    ) -> None:
        if lines_per_chunk < 1:
            raise ValueError("lines_per_chunk must be >= 1")
        if overlap_lines < 0:
            raise ValueError("overlap_lines must be >= 0")
        if overlap_lines >= lines_per_chunk:
            raise ValueError("overlap_lines must be less than lines_per_chunk")
        if max_chars < 1:
            raise ValueError("max_chars must be >= 1")
        self.lines_per_chunk = lines_per_chunk
        self.overlap_lines = overlap_lines
        self.max_chars = max_chars

    @property
    def step(self) -> int:
        return self.lines_per_chunk - self.overlap_lines

    def iter_windows(self, text: str) -> Iterator[List[str]]:
        # Only "\n" separates lines; form feeds and U+2028 stay inside their line.
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        start = 0
        while start < len(lines):
            yield lines[start : start + self.lines_per_chunk]
            if start + self.lines_per_chunk >= len(lines):
                break
            start += self.step

    def iter_chunks(self, text: str) -> Iterator[str]:
        for window in self.iter_windows(text):
            chunk = "\n".join(window)
            if not chunk:
                continue
            if len(chunk) <= self.max_chars:
                yield chunk
                continue
            for offset in range(0, len(chunk), self.max_chars):
                yield chunk[offset : offset + self.max_chars]

    def chunk(self, text: str) -> List[str]:
        return list(self.iter_chunks(text))

    def chunk_file(self, source: SourceFile) -> List[Chunk]:
        return [
            Chunk(source_path=source.path, part_index=index, content=content)
            for index, content in enumerate(self.iter_chunks(source.content))
        ]

    def chunk_files(self, sources: Iterable[SourceFile]) -> List[Chunk]:
        chunks: List[Chunk] = []
        for source in sources:
            chunks.extend(self.chunk_file(source))
        return chunks


def chunk_text(
    text: str,
    lines_per_chunk: int = DEFAULT_LINES_PER_CHUNK,
    overlap_lines: int = DEFAULT_OVERLAP_LINES,
) -> List[str]:
    """Convenience wrapper around :class:`LineChunker`."""
    return LineChunker(lines_per_chunk=lines_per_chunk, overlap_lines=overlap_lines).chunk(text)


__all__ = ["LineChunker", "chunk_text"]
