"""Contract implemented by repository backends."""

from __future__ import annotations

from typing import Protocol

from ..models import RepoInfo, TreeListing


class RepositorySource(Protocol):
    """Supplies repository identity, the file tree and file contents.

    ``describe`` and ``list_tree`` failures are fatal for a run and raise
    ``TreeSourceError``. ``fetch`` and ``fetch_readme`` raise ``ContentFetchError``
    for one file, which callers skip.
    """

    def describe(self) -> RepoInfo:
        ...

    def list_tree(self) -> TreeListing:
        ...

    def fetch(self, path: str) -> str:
        ...

    def fetch_readme(self) -> str:
        ...

    def fingerprint(self) -> str:
        """Stable identity of the target, used as part of the cache key."""
        ...
