"""Single-slot cache for the most recent repository snapshot."""

from __future__ import annotations

import hashlib
import json
from typing import Optional

from ..models import RepoSnapshot

_CACHE_VERSION = 1


def request_fingerprint(
    source_fingerprint: str,
    *,
    max_files: int,
    tree_cap: int,
    has_token: bool = False,
) -> str:
    """Hash the parameters that determine a snapshot's content.

    The token itself never enters the key, only whether one was supplied.
    """
    payload = {
        "version": _CACHE_VERSION,
        "source": source_fingerprint,
        "max_files": max_files,
        "tree_cap": tree_cap,
        "has_token": has_token,
    }
    encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class SnapshotCache:
    """Holds at most one snapshot; storing a new one replaces the previous entry.

    The cache is owned by the caller (CLI process or service app) and is never
    persisted to disk.
    """

    def __init__(self) -> None:
        self._key: Optional[str] = None
        self._snapshot: Optional[RepoSnapshot] = None

    @property
    def key(self) -> Optional[str]:
        return self._key

    def get(self, key: str) -> Optional[RepoSnapshot]:
        if self._snapshot is None or key != self._key:
            return None
        return self._snapshot

    def store(self, key: str, snapshot: RepoSnapshot) -> None:
        self._key = key
        self._snapshot = snapshot

    def invalidate(self) -> None:
        self._key = None
        self._snapshot = None


__all__ = ["SnapshotCache", "request_fingerprint"]
