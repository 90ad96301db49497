"""Path filtering, scoring and selection."""

from .budget import TreeBudget, budget_tree
from .filters import PathFilter, PathVerdict, normalize_path
from .scoring import score_path
from .selector import FileSelector, clamp_limit, clamp_max_files, is_source_candidate

__all__ = [
    "FileSelector",
    "PathFilter",
    "PathVerdict",
    "TreeBudget",
    "budget_tree",
    "clamp_limit",
    "clamp_max_files",
    "is_source_candidate",
    "normalize_path",
    "score_path",
]
