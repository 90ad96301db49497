"""Path-only relevance heuristic used to rank candidate files.

The weights are a fixed table. Only the relative order they induce matters:
callers compare scores between candidates and never interpret the absolute value.
"""

from __future__ import annotations

from .constants import (
    AUX_KEYWORDS,
    AUX_PENALTY,
    CORE_DIRS,
    CORE_DIR_BONUS,
    IMPORTANT_NAMES,
    IMPORTANT_NAME_BONUS,
    TEST_DIR_NAMES,
    TEST_PENALTY,
)


def score_path(path: str) -> int:
    """Return the relevance score of ``path``; higher means more relevant."""
    lower_path = path.replace("\\", "/").lower()
    parts = lower_path.split("/")
    file_name = parts[-1]

    score = 0
    if _looks_like_test(parts, file_name):
        score -= TEST_PENALTY
    if any(keyword in lower_path for keyword in AUX_KEYWORDS):
        score -= AUX_PENALTY
    if any(lower_path.startswith(core) or f"/{core}" in lower_path for core in CORE_DIRS):
        score += CORE_DIR_BONUS
    if any(name in file_name for name in IMPORTANT_NAMES):
        score += IMPORTANT_NAME_BONUS
    score -= len(parts)
    return score


def _looks_like_test(parts: list[str], file_name: str) -> bool:
    if any(part in TEST_DIR_NAMES for part in parts[:-1]):
        return True
    return (
        ".test." in file_name
        or ".spec." in file_name
        or file_name.startswith("test_")
        or file_name.endswith("_test.go")
    )


__all__ = ["score_path"]
