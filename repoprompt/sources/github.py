"""GitHub REST API backend for repository trees and file contents."""

from __future__ import annotations

import base64
import binascii
import json
import os
import re
from http.client import HTTPException
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.error import HTTPError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..errors import ContentFetchError, InvalidTargetError, TreeSourceError
from ..logging import get_logger
from ..models import PathEntry, RepoInfo, TreeListing

_URL_PATTERN = re.compile(
    r"^https://github\.com/(?P<owner>[A-Za-z0-9-._]+)/(?P<repo>[A-Za-z0-9-._]+)"
    r"(?:/tree/(?P<branch>[^?#]+))?(?:[/?#].*)?$"
)
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9-._]+$")
_USER_AGENT = "repoprompt (+https://github.com)"


@dataclass(frozen=True)
class GitHubTarget:
    """Owner/repository pair, optionally pinned to a branch."""

    owner: str
    repo: str
    branch: Optional[str] = None


def parse_github_url(url: str) -> GitHubTarget:
    """Parse ``https://github.com/<owner>/<repo>[/tree/<branch>]``."""
    match = _URL_PATTERN.match(url.strip())
    if not match:
        raise InvalidTargetError(
            "Invalid GitHub URL format. Please provide a full URL like https://github.com/owner/repo"
        )
    repo = match.group("repo")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return make_target(match.group("owner"), repo, match.group("branch"))


def make_target(owner: str, repo: str, branch: str | None = None) -> GitHubTarget:
    """Validate owner/repo names before they are interpolated into API URLs."""
    if not _NAME_PATTERN.match(owner or "") or not _NAME_PATTERN.match(repo or ""):
        raise InvalidTargetError("Invalid owner or repo format.")
    if owner in {".", ".."} or repo in {".", ".."}:
        raise InvalidTargetError("Invalid owner or repo format.")
    cleaned_branch = branch.strip("/") if branch else None
    return GitHubTarget(owner=owner, repo=repo, branch=cleaned_branch or None)


class GitHubSource:
    """Reads a repository through ``api.github.com``.

    The recursive tree endpoint applies its own ceiling on very large repositories
    and reports it through ``truncated``; that flag is passed through untouched.
    """

    API_ROOT = "https://api.github.com"
    ENV_TOKEN_KEYS = ("REPOPROMPT_GITHUB_TOKEN", "GITHUB_TOKEN")

    def __init__(
        self,
        target: GitHubTarget,
        *,
        token: str | None = None,
        request_timeout: Optional[float] = 30.0,
    ) -> None:
        self.target = target
        self.token = token or _first_env_value(self.ENV_TOKEN_KEYS)
        self.request_timeout = request_timeout
        self.logger = get_logger("sources.github")
        self._branch: Optional[str] = target.branch

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.target.owner}/{self.target.repo}"

    def fingerprint(self) -> str:
        branch = self.target.branch or "<default>"
        return f"github:{self.target.owner}/{self.target.repo}@{branch}"

    def describe(self) -> RepoInfo:
        try:
            payload = self._get_json(self.repo_path)
        except HTTPError as exc:
            raise TreeSourceError(self._describe_http_error(exc)) from exc
        except (OSError, ValueError) as exc:
            raise TreeSourceError(f"Network error while contacting GitHub: {exc}") from exc

        default_branch = payload.get("default_branch")
        description = payload.get("description")
        if self._branch is None:
            self._branch = default_branch if isinstance(default_branch, str) and default_branch else "main"
        return RepoInfo(
            owner=self.target.owner,
            repo=self.target.repo,
            branch=self._branch,
            description=description if isinstance(description, str) and description else "No description provided.",
        )

    def list_tree(self) -> TreeListing:
        branch = self._branch or self.describe().branch
        endpoint = f"{self.repo_path}/git/trees/{quote(branch, safe='')}?recursive=1"
        try:
            payload = self._get_json(endpoint)
        except HTTPError as exc:
            raise TreeSourceError(self._describe_http_error(exc, what="repository tree")) from exc
        except (OSError, ValueError) as exc:
            raise TreeSourceError(f"Network error while fetching the tree: {exc}") from exc

        raw_entries = payload.get("tree")
        entries: List[PathEntry] = []
        if isinstance(raw_entries, list):
            for item in raw_entries:
                if not isinstance(item, dict):
                    continue
                path = item.get("path")
                kind = item.get("type")
                if isinstance(path, str) and isinstance(kind, str):
                    entries.append(PathEntry(path=path, type=kind))
        upstream_truncated = bool(payload.get("truncated"))
        if upstream_truncated:
            self.logger.warning("GitHub truncated the tree listing for %s", self.fingerprint())
        return TreeListing(entries=tuple(entries), upstream_truncated=upstream_truncated)

    def fetch(self, path: str) -> str:
        endpoint = f"{self.repo_path}/contents/{quote(path)}"
        if self._branch:
            endpoint += f"?ref={quote(self._branch, safe='')}"
        return self._fetch_content(endpoint, path)

    def fetch_readme(self) -> str:
        return self._fetch_content(f"{self.repo_path}/readme", "README")

    # ------------------------------------------------------------------
    # HTTP helpers

    def _fetch_content(self, endpoint: str, label: str) -> str:
        try:
            payload = self._get_json(endpoint)
        except HTTPError as exc:
            raise ContentFetchError(label, f"HTTP {exc.code}") from exc
        except (OSError, ValueError) as exc:
            raise ContentFetchError(label, str(exc)) from exc
        content = payload.get("content")
        if not isinstance(content, str):
            raise ContentFetchError(label, "response has no content field")
        return decode_content(content, label)

    def _get_json(self, endpoint: str) -> Dict[str, object]:
        request = Request(f"{self.API_ROOT}{endpoint}", headers=self._headers(), method="GET")
        try:
            with urlopen(request, timeout=self.request_timeout or 30.0) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPException as exc:
            raise ValueError(f"GitHub response for {endpoint} could not be read: {exc!r}") from exc
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError(f"GitHub returned invalid JSON for {endpoint}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"GitHub returned an unexpected payload for {endpoint}")
        return payload

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": _USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    @staticmethod
    def _describe_http_error(exc: HTTPError, *, what: str = "repository info") -> str:
        if exc.code == 403:
            return "GitHub API rate limit exceeded. Please try again later or provide a GitHub token."
        if exc.code == 404:
            return "Repository not found. Please check the URL or provide a token for private repos."
        return f"Failed to fetch {what}: HTTP {exc.code} {exc.reason}"


def decode_content(content: str, label: str = "file") -> str:
    """Decode a base64 ``contents`` payload, replacing invalid UTF-8 bytes."""
    cleaned = content.replace("\n", "").replace("\r", "")
    try:
        raw = base64.b64decode(cleaned, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ContentFetchError(label, "invalid base64 payload") from exc
    return raw.decode("utf-8", errors="replace")


def _first_env_value(keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


__all__ = ["GitHubSource", "GitHubTarget", "decode_content", "make_target", "parse_github_url"]
