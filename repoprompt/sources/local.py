"""Local filesystem backend."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Sequence

from ..errors import ContentFetchError, InvalidTargetError
from ..models import PathEntry, RepoInfo, TreeListing
from ..selection.constants import LOCAL_EXCLUDED_DIRS, README_NAME

# Editor and VCS metadata never carries project code.
_SKIPPED_DIRS = {".idea", ".vscode", ".hg", ".svn"}

DEFAULT_MAX_FILE_BYTES = 1_000_000


class LocalSource:
    """Walks a directory on disk and reads files as UTF-8 text."""

    def __init__(
        self,
        root: str | Path,
        *,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
        excluded_dirs: Sequence[str] = LOCAL_EXCLUDED_DIRS,
    ) -> None:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise InvalidTargetError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise InvalidTargetError(f"Repository path is not a directory: {root}")
        self.root = root_path
        self.max_file_bytes = max_file_bytes
        self._pruned = set(excluded_dirs) | _SKIPPED_DIRS

    def fingerprint(self) -> str:
        return f"local:{self.root.as_posix()}"

    def describe(self) -> RepoInfo:
        return RepoInfo(
            owner="local",
            repo=self.root.name or "local-project",
            branch="local",
            description="Local folder analysis",
        )

    def list_tree(self) -> TreeListing:
        entries = [PathEntry(path=rel_path, type="blob") for rel_path in self._iter_files()]
        return TreeListing(entries=tuple(entries))

    def fetch(self, path: str) -> str:
        target = self._resolve(path)
        try:
            size = target.stat().st_size
        except OSError as exc:
            raise ContentFetchError(path, str(exc)) from exc
        if size > self.max_file_bytes:
            raise ContentFetchError(path, f"file exceeds {self.max_file_bytes} bytes")
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ContentFetchError(path, str(exc)) from exc

    def fetch_readme(self) -> str:
        for child in sorted(self.root.iterdir()):
            if child.is_file() and child.name.lower() == README_NAME:
                return self.fetch(child.name)
        raise ContentFetchError("README", "no README.md at repository root")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ContentFetchError(path, "path escapes the repository root")
        return target

    def _iter_files(self) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            current_dir = Path(dirpath)
            dirnames[:] = sorted(name for name in dirnames if name not in self._pruned)
            rel_dir = current_dir.relative_to(self.root).as_posix() if current_dir != self.root else ""
            for filename in sorted(filenames):
                yield f"{rel_dir}/{filename}" if rel_dir else filename


__all__ = ["DEFAULT_MAX_FILE_BYTES", "LocalSource"]
