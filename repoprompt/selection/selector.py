"""Top-N selection of source files by path score."""

from __future__ import annotations

from typing import Any, Callable, List, Sequence

from ..models import ScoredFile
from .constants import (
    DEFAULT_MAX_FILES,
    DEPENDENCY_MANIFESTS,
    MAX_MAX_FILES,
    MIN_MAX_FILES,
    README_NAME,
    SOURCE_EXTENSIONS,
)
from .scoring import score_path


def clamp_limit(value: Any, *, lower: int, upper: int, default: int) -> int:
    """Coerce ``value`` to an int inside ``[lower, upper]``.

    Missing or non-numeric values fall back to ``default``; out-of-range values are
    clamped rather than rejected.
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    return min(max(lower, number), upper)


def clamp_max_files(value: Any) -> int:
    return clamp_limit(value, lower=MIN_MAX_FILES, upper=MAX_MAX_FILES, default=DEFAULT_MAX_FILES)


def is_dependency_manifest(path: str) -> bool:
    return path in DEPENDENCY_MANIFESTS


def is_readme(path: str) -> bool:
    return path.lower() == README_NAME


def is_source_candidate(path: str) -> bool:
    """Return True when ``path`` may compete for one of the selected-file slots."""
    if is_dependency_manifest(path) or is_readme(path):
        return False
    return path.endswith(SOURCE_EXTENSIONS)


class FileSelector:
    """Ranks eligible paths and keeps the best ``limit`` of them."""

    def __init__(self, scorer: Callable[[str], int] = score_path) -> None:
        self.scorer = scorer

    def rank(self, paths: Sequence[str]) -> List[ScoredFile]:
        """Return source candidates ordered by descending score.

        ``sorted`` is stable, so equal scores keep their input order.
        """
        scored = [ScoredFile(path=path, score=self.scorer(path)) for path in paths if is_source_candidate(path)]
        return sorted(scored, key=lambda item: -item.score)

    def select(self, paths: Sequence[str], limit: Any = DEFAULT_MAX_FILES) -> List[str]:
        effective = clamp_max_files(limit)
        return [item.path for item in self.rank(paths)[:effective]]


__all__ = [
    "FileSelector",
    "clamp_limit",
    "clamp_max_files",
    "is_dependency_manifest",
    "is_readme",
    "is_source_candidate",
]
