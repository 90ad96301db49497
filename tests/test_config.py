"""Tests for repoprompt.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoprompt.config import AppConfig, ConfigError, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, AppConfig)
    assert config.root == tmp_path.resolve()
    assert config.generator == "none"
    assert config.ollama.base_url is None
    assert config.ollama.model == "llama3"
    assert config.ollama.embedding_model == "nomic-embed-text"
    assert config.ollama.num_predict == 250
    assert config.ollama.final_num_predict == 2048
    assert config.gemini.model == "gemini-3-flash-preview"
    assert config.selection.max_files == 5
    assert config.selection.tree_cap == 1000
    assert config.rag.top_k == 10
    assert config.rag.lines_per_chunk == 30
    assert config.rag.overlap_lines == 5
    assert config.rag.max_workers == 1
    assert config.prompt.templates_dir is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".repoprompt.yml"
    config_file.write_text(
        """
generator: Ollama
ollama:
  base_url: "http://gpu-box:11434"
  model: "qwen2.5-coder:7b"
  embedding_model: "mxbai-embed-large"
  num_ctx: 16384
  temperature: 0.2
  request_timeout: 600
gemini:
  api_key: "test-key"
github:
  token: "ghp_example"
  request_timeout: 15
selection:
  max_files: 12
  tree_cap: 300
rag:
  top_k: 20
  lines_per_chunk: 40
  overlap_lines: 8
  max_workers: 2
prompt:
  templates_dir: "prompts"
  task_instruction: "Summarize the architecture."
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.generator == "ollama"
    assert config.ollama.base_url == "http://gpu-box:11434"
    assert config.ollama.model == "qwen2.5-coder:7b"
    assert config.ollama.embedding_model == "mxbai-embed-large"
    assert config.ollama.num_ctx == 16384
    assert config.ollama.temperature == pytest.approx(0.2)
    assert config.ollama.request_timeout == pytest.approx(600.0)
    assert config.gemini.api_key == "test-key"
    assert config.gemini.model == "gemini-3-flash-preview"
    assert config.github.token == "ghp_example"
    assert config.github.request_timeout == pytest.approx(15.0)
    assert config.selection.max_files == 12
    assert config.selection.tree_cap == 300
    assert config.rag.top_k == 20
    assert config.rag.lines_per_chunk == 40
    assert config.rag.overlap_lines == 8
    assert config.rag.max_workers == 2
    assert config.prompt.templates_dir == tmp_path.resolve() / "prompts"
    assert config.prompt.task_instruction == "Summarize the architecture."


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / ".repoprompt.yml").write_text("\n# nothing here\n", encoding="utf-8")
    assert load_config(tmp_path).selection.max_files == 5


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".repoprompt.yml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_malformed_yaml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".repoprompt.yml").write_text("ollama: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "body",
    [
        "generator: gpt4\n",
        "rag:\n  lines_per_chunk: 10\n  overlap_lines: 10\n",
        "rag:\n  max_workers: 0\n",
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, body: str) -> None:
    (tmp_path / ".repoprompt.yml").write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_wrong_types_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".repoprompt.yml").write_text(
        "selection:\n  max_files: many\n  tree_cap: true\nollama: nope\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config.selection.max_files == 5
    assert config.selection.tree_cap == 1000
    assert config.ollama.model == "llama3"
