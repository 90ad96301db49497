"""Caps the tree listing embedded in the final document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class TreeBudget:
    """Listing after the cap was applied."""

    paths: Tuple[str, ...]
    is_truncated: bool


def budget_tree(paths: Sequence[str], cap: int) -> TreeBudget:
    """Keep the first ``cap`` paths in their original order.

    Only the listing is capped. File selection works on the full eligible list.
    """
    cap = max(0, cap)
    if len(paths) <= cap:
        return TreeBudget(paths=tuple(paths), is_truncated=False)
    return TreeBudget(paths=tuple(paths[:cap]), is_truncated=True)


__all__ = ["TreeBudget", "budget_tree"]
