"""Tests for the GitHub REST source."""

from __future__ import annotations

import base64
from urllib.error import URLError

import pytest

from repoprompt.errors import ContentFetchError, InvalidTargetError, TreeSourceError
from repoprompt.sources import GitHubSource, GitHubTarget, open_source, parse_github_url
from repoprompt.sources.github import decode_content
from tests._fixtures.http import FakeUrlopen, TruncatedResponse, http_error

API = "https://api.github.com/repos/acme/widgets"


def _encoded(text: str) -> str:
    raw = base64.b64encode(text.encode("utf-8")).decode("ascii")
    # The contents API wraps base64 at 60 characters.
    return "\n".join(raw[i : i + 60] for i in range(0, len(raw), 60))


@pytest.fixture
def fake_github(monkeypatch: pytest.MonkeyPatch) -> FakeUrlopen:
    fake = FakeUrlopen(
        {
            "/git/trees/": {
                "tree": [
                    {"path": "src", "type": "tree"},
                    {"path": "src/index.ts", "type": "blob"},
                    {"path": "package.json", "type": "blob"},
                ],
                "truncated": False,
            },
            "/contents/src/index.ts": {"content": _encoded("export const answer = 42;\n" * 5)},
            "/readme": {"content": _encoded("# Widgets")},
            "/repos/acme/widgets": {"default_branch": "develop", "description": "Widget factory"},
        }
    )
    monkeypatch.setattr("repoprompt.sources.github.urlopen", fake)
    return fake


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/acme/widgets", GitHubTarget("acme", "widgets")),
        ("https://github.com/acme/widgets.git", GitHubTarget("acme", "widgets")),
        ("https://github.com/acme/widgets/", GitHubTarget("acme", "widgets")),
        ("https://github.com/acme/widgets/tree/feature/x", GitHubTarget("acme", "widgets", "feature/x")),
        ("https://github.com/acme/widgets?tab=readme", GitHubTarget("acme", "widgets")),
        ("https://github.com/my.org/my_repo-2", GitHubTarget("my.org", "my_repo-2")),
    ],
)
def test_parse_github_url(url: str, expected: GitHubTarget) -> None:
    assert parse_github_url(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "https://gitlab.com/acme/widgets",
        "https://github.com/acme",
        "https://github.com/../widgets",
        "github.com/acme/widgets",
    ],
)
def test_parse_github_url_rejects_invalid_targets(url: str) -> None:
    with pytest.raises(InvalidTargetError):
        parse_github_url(url)


def test_describe_resolves_default_branch(fake_github: FakeUrlopen) -> None:
    source = GitHubSource(GitHubTarget("acme", "widgets"))
    info = source.describe()

    assert info.branch == "develop"
    assert info.description == "Widget factory"
    assert info.full_name == "acme/widgets"


def test_list_tree_uses_resolved_branch(fake_github: FakeUrlopen) -> None:
    source = GitHubSource(GitHubTarget("acme", "widgets"))
    listing = source.list_tree()

    assert f"{API}/git/trees/develop?recursive=1" in fake_github.urls
    assert listing.blob_paths() == ["src/index.ts", "package.json"]
    assert not listing.upstream_truncated


def test_fetch_decodes_base64_content(fake_github: FakeUrlopen) -> None:
    source = GitHubSource(GitHubTarget("acme", "widgets", "main"))
    content = source.fetch("src/index.ts")

    assert content == "export const answer = 42;\n" * 5
    assert fake_github.urls[-1] == f"{API}/contents/src/index.ts?ref=main"
    assert source.fetch_readme() == "# Widgets"


def test_missing_file_raises_content_fetch_error(fake_github: FakeUrlopen) -> None:
    source = GitHubSource(GitHubTarget("acme", "widgets", "main"))
    with pytest.raises(ContentFetchError) as excinfo:
        source.fetch("src/missing.ts")
    assert excinfo.value.path == "src/missing.ts"


def test_token_is_sent_as_authorization_header(fake_github: FakeUrlopen) -> None:
    GitHubSource(GitHubTarget("acme", "widgets"), token="secret-token").describe()
    headers = {key.lower(): value for key, value in fake_github.requests[0].header_items()}

    assert headers["authorization"] == "token secret-token"
    assert headers["accept"] == "application/vnd.github.v3+json"


def test_token_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "env-token")
    assert GitHubSource(GitHubTarget("acme", "widgets")).token == "env-token"


@pytest.mark.parametrize(
    ("status", "message"),
    [(403, "rate limit exceeded"), (404, "Repository not found"), (500, "HTTP 500")],
)
def test_repository_errors_are_fatal(monkeypatch: pytest.MonkeyPatch, status: int, message: str) -> None:
    fake = FakeUrlopen({"/repos/acme/widgets": http_error(API, status)})
    monkeypatch.setattr("repoprompt.sources.github.urlopen", fake)

    with pytest.raises(TreeSourceError, match=message):
        GitHubSource(GitHubTarget("acme", "widgets")).describe()


def test_network_errors_are_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeUrlopen({"/repos/acme/widgets": URLError("no route to host")})
    monkeypatch.setattr("repoprompt.sources.github.urlopen", fake)

    with pytest.raises(TreeSourceError, match="Network error"):
        GitHubSource(GitHubTarget("acme", "widgets", "main")).list_tree()


def test_upstream_truncation_is_passed_through(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeUrlopen({"/git/trees/": {"tree": [{"path": "a.py", "type": "blob"}], "truncated": True}})
    monkeypatch.setattr("repoprompt.sources.github.urlopen", fake)

    listing = GitHubSource(GitHubTarget("acme", "widgets", "main")).list_tree()
    assert listing.upstream_truncated


def test_decode_content_replaces_invalid_utf8() -> None:
    payload = base64.b64encode(b"ok \xff\xfe done").decode("ascii")
    assert decode_content(payload) == "ok \ufffd\ufffd done"


def test_open_source_dispatches_on_target(tmp_path) -> None:
    github = open_source("http://github.com/acme/widgets", branch="release")
    assert isinstance(github, GitHubSource)
    assert github.target == GitHubTarget("acme", "widgets", "release")
    assert github.fingerprint() == "github:acme/widgets@release"

    local = open_source(str(tmp_path))
    assert local.fingerprint().startswith("local:")

    with pytest.raises(InvalidTargetError):
        open_source("ftp://example.com/repo")
    with pytest.raises(InvalidTargetError):
        open_source("   ")


def test_cut_off_file_body_is_a_content_fetch_error(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeUrlopen(
        {
            "/contents/src/index.ts": TruncatedResponse(),
            "/contents/package.json": {"content": _encoded('{"name": "widgets"}')},
        }
    )
    monkeypatch.setattr("repoprompt.sources.github.urlopen", fake)
    source = GitHubSource(GitHubTarget("acme", "widgets", "main"))

    with pytest.raises(ContentFetchError) as excinfo:
        source.fetch("src/index.ts")
    assert excinfo.value.path == "src/index.ts"
    assert source.fetch("package.json") == '{"name": "widgets"}'


def test_cut_off_repository_info_is_a_tree_source_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "repoprompt.sources.github.urlopen", FakeUrlopen({"/repos/acme/widgets": TruncatedResponse()})
    )
    with pytest.raises(TreeSourceError):
        GitHubSource(GitHubTarget("acme", "widgets")).describe()
