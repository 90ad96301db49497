"""Repository backends feeding the selection pipeline."""

from __future__ import annotations

from pathlib import Path

from ..errors import InvalidTargetError
from .base import RepositorySource
from .github import GitHubSource, GitHubTarget, make_target, parse_github_url
from .local import LocalSource


def looks_like_github_url(target: str) -> bool:
    return target.strip().lower().startswith(("https://github.com/", "http://github.com/"))


def open_source(
    target: str,
    *,
    branch: str | None = None,
    token: str | None = None,
    request_timeout: float | None = 30.0,
    max_file_bytes: int | None = None,
) -> RepositorySource:
    """Build the backend matching ``target`` (GitHub URL or local directory)."""
    if not target or not target.strip():
        raise InvalidTargetError("A GitHub URL or a local directory is required.")
    if looks_like_github_url(target):
        if target.strip().lower().startswith("http://"):
            target = "https://" + target.strip()[len("http://") :]
        parsed = parse_github_url(target)
        if branch:
            parsed = make_target(parsed.owner, parsed.repo, branch)
        return GitHubSource(parsed, token=token, request_timeout=request_timeout)
    if "://" in target:
        raise InvalidTargetError(f"Unsupported repository URL: {target}")
    if max_file_bytes is not None:
        return LocalSource(Path(target), max_file_bytes=max_file_bytes)
    return LocalSource(Path(target))


__all__ = [
    "GitHubSource",
    "GitHubTarget",
    "LocalSource",
    "RepositorySource",
    "looks_like_github_url",
    "make_target",
    "open_source",
    "parse_github_url",
]
