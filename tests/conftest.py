from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials and server URLs from the developer's shell out of tests."""
    for key in (
        "GITHUB_TOKEN",
        "REPOPROMPT_GITHUB_TOKEN",
        "GEMINI_API_KEY",
        "VITE_GEMINI_API_KEY",
        "OLLAMA_HOST",
        "REPOPROMPT_OLLAMA_URL",
    ):
        monkeypatch.delenv(key, raising=False)
