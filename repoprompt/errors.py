"""Exception hierarchy for repoprompt pipelines."""

from __future__ import annotations


class RepoPromptError(RuntimeError):
    """Base class for every error raised by repoprompt."""


class InvalidTargetError(RepoPromptError):
    """Raised when a repository URL or local path cannot be used as a target."""


class InvalidRequestError(RepoPromptError):
    """Raised when request parameters are inconsistent (e.g. RAG without a query)."""


class TreeSourceError(RepoPromptError):
    """Raised when repository metadata or the file tree cannot be retrieved."""


class ContentFetchError(RepoPromptError):
    """Raised when a single file cannot be fetched; callers skip the file."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to fetch {path}: {reason}")
        self.path = path
        self.reason = reason


class EmbeddingError(RepoPromptError):
    """Raised when an embedding cannot be produced for a text."""


class GenerationError(RepoPromptError):
    """Raised when the generation backend fails or is not configured."""


__all__ = [
    "ContentFetchError",
    "EmbeddingError",
    "GenerationError",
    "InvalidRequestError",
    "InvalidTargetError",
    "RepoPromptError",
    "TreeSourceError",
]
