"""Hard and secret exclusion rules applied before any scoring."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence

from .constants import HARD_EXCLUDED_DIRS, SECRET_PATTERNS


class PathVerdict(str, Enum):
    """Classification outcome for a repository path."""

    ELIGIBLE = "eligible"
    HARD_EXCLUDED = "hard_excluded"
    SECRET_EXCLUDED = "secret_excluded"


def normalize_path(path: str) -> str:
    """Return ``path`` with forward slashes and no leading ``./`` or ``/``."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


class PathFilter:
    """Classifies paths as eligible, build/dependency output, or secret material."""

    def __init__(
        self,
        *,
        excluded_dirs: Sequence[str] = HARD_EXCLUDED_DIRS,
        secret_patterns: Sequence[str] = SECRET_PATTERNS,
    ) -> None:
        self.excluded_dirs = tuple(excluded_dirs)
        self.secret_patterns = tuple(secret_patterns)

    def classify(self, path: str) -> PathVerdict:
        normalized = normalize_path(path)
        if self._is_hard_excluded(normalized):
            return PathVerdict.HARD_EXCLUDED
        if self._is_secret(normalized):
            return PathVerdict.SECRET_EXCLUDED
        return PathVerdict.ELIGIBLE

    def is_eligible(self, path: str) -> bool:
        return self.classify(path) is PathVerdict.ELIGIBLE

    def filter(self, paths: Iterable[str]) -> List[str]:
        """Return the eligible paths, normalized, in their original order."""
        return [normalize_path(path) for path in paths if self.is_eligible(path)]

    def _is_hard_excluded(self, path: str) -> bool:
        segments = path.split("/")
        for name in self.excluded_dirs:
            if name in segments:
                return True
            if path.startswith(f"{name}/") or f"/{name}/" in path:
                return True
        return False

    def _is_secret(self, path: str) -> bool:
        segments = path.split("/")
        for pattern in self.secret_patterns:
            if path.endswith(pattern) or pattern in segments:
                return True
            if f"/{pattern}/" in f"/{path}":
                return True
        return False


__all__ = ["PathFilter", "PathVerdict", "normalize_path"]
