"""Core data models shared across repoprompt components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class PathEntry:
    """A repository-relative path plus its tree type (``blob`` or ``tree``)."""

    path: str
    type: str = "blob"

    @property
    def is_blob(self) -> bool:
        return self.type == "blob"


@dataclass(frozen=True)
class TreeListing:
    """Ordered tree entries as returned by a repository source."""

    entries: Tuple[PathEntry, ...]
    upstream_truncated: bool = False

    def blob_paths(self) -> List[str]:
        return [entry.path for entry in self.entries if entry.is_blob]


@dataclass(frozen=True)
class ScoredFile:
    """A candidate path and its heuristic relevance score."""

    path: str
    score: int


@dataclass(frozen=True)
class SourceFile:
    """Decoded text of one selected file."""

    path: str
    content: str


@dataclass(frozen=True)
class RepoInfo:
    """Identity of the repository a snapshot was taken from."""

    owner: str
    repo: str
    branch: str
    description: str = "No description provided."

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RepoSnapshot:
    """Immutable bundle produced by one collection run."""

    info: RepoInfo
    tree: Tuple[str, ...]
    is_truncated: bool
    readme: str
    dependencies: str
    source_files: Tuple[SourceFile, ...]
    failed_files: Tuple[str, ...] = ()

    @property
    def selected_files(self) -> List[str]:
        return [item.path for item in self.source_files]


@dataclass
class Chunk:
    """Line-window fragment of one source file."""

    source_path: str
    part_index: int
    content: str
    embedding: Optional[List[float]] = None
    score: Optional[float] = None

    @property
    def label(self) -> str:
        return f"{self.source_path} (Part {self.part_index + 1})"


@dataclass(frozen=True)
class RankedChunk:
    """Chunk that survived the top-K cut, with its cosine similarity."""

    source_path: str
    part_index: int
    content: str
    score: float

    @property
    def label(self) -> str:
        return f"{self.source_path} (Part {self.part_index + 1})"

    @property
    def annotated_content(self) -> str:
        return f"// RAG Semantic Similarity Score: {self.score * 100:.1f}%\n{self.content}"


@dataclass
class PipelineResult:
    """Outcome of a full generation request."""

    document: str
    output: str
    is_truncated: bool
    selected_files: List[str] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    failed_chunks: int = 0
