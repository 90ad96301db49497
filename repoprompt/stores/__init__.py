"""In-memory stores shared across pipeline runs."""

from .snapshot_cache import SnapshotCache, request_fingerprint

__all__ = ["SnapshotCache", "request_fingerprint"]
