"""Configuration loading for repoprompt (.repoprompt.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import RepoPromptError
from .rag.constants import DEFAULT_EMBEDDING_MODEL, DEFAULT_LINES_PER_CHUNK, DEFAULT_OVERLAP_LINES, DEFAULT_TOP_K
from .selection.constants import DEFAULT_MAX_FILES, DEFAULT_TREE_CAP

CONFIG_FILENAME = ".repoprompt.yml"
GENERATORS = ("none", "gemini", "ollama")


class ConfigError(RepoPromptError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class OllamaConfig:
    """Local Ollama server settings."""

    base_url: Optional[str] = None
    model: str = "llama3"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    num_ctx: int = 8192
    num_predict: int = 250
    final_num_predict: int = 2048
    temperature: float = 0.3
    request_timeout: float = 3600.0


@dataclass
class GeminiConfig:
    """Gemini generateContent settings."""

    model: str = "gemini-3-flash-preview"
    api_key: Optional[str] = None
    request_timeout: float = 120.0


@dataclass
class GitHubConfig:
    token: Optional[str] = None
    request_timeout: float = 30.0


@dataclass
class SelectionConfig:
    max_files: int = DEFAULT_MAX_FILES
    tree_cap: int = DEFAULT_TREE_CAP
    local_max_file_bytes: int = 1_000_000


@dataclass
class RAGConfig:
    top_k: int = DEFAULT_TOP_K
    lines_per_chunk: int = DEFAULT_LINES_PER_CHUNK
    overlap_lines: int = DEFAULT_OVERLAP_LINES
    max_workers: int = 1


@dataclass
class PromptConfig:
    templates_dir: Optional[Path] = None
    task_instruction: Optional[str] = None


@dataclass
class AppConfig:
    """Represents the settings defined in .repoprompt.yml."""

    root: Path
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    rag: RAGConfig = field(default_factory=RAGConfig)
    prompt: PromptConfig = field(default_factory=PromptConfig)
    generator: str = "none"


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    if not config_file.exists():
        return AppConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = AppConfig(root=root)

    ollama_data = _as_dict(data.get("ollama"))
    ollama = config.ollama
    ollama.base_url = _as_str(ollama_data.get("base_url")) or ollama.base_url
    ollama.model = _as_str(ollama_data.get("model")) or ollama.model
    ollama.embedding_model = _as_str(ollama_data.get("embedding_model")) or ollama.embedding_model
    ollama.num_ctx = _pick(_as_int(ollama_data.get("num_ctx")), ollama.num_ctx)
    ollama.num_predict = _pick(_as_int(ollama_data.get("num_predict")), ollama.num_predict)
    ollama.final_num_predict = _pick(_as_int(ollama_data.get("final_num_predict")), ollama.final_num_predict)
    ollama.temperature = _pick(_as_float(ollama_data.get("temperature")), ollama.temperature)
    ollama.request_timeout = _pick(_as_float(ollama_data.get("request_timeout")), ollama.request_timeout)

    gemini_data = _as_dict(data.get("gemini"))
    gemini = config.gemini
    gemini.model = _as_str(gemini_data.get("model")) or gemini.model
    gemini.api_key = _as_str(gemini_data.get("api_key")) or gemini.api_key
    gemini.request_timeout = _pick(_as_float(gemini_data.get("request_timeout")), gemini.request_timeout)

    github_data = _as_dict(data.get("github"))
    config.github.token = _as_str(github_data.get("token")) or config.github.token
    config.github.request_timeout = _pick(
        _as_float(github_data.get("request_timeout")), config.github.request_timeout
    )

    selection_data = _as_dict(data.get("selection"))
    selection = config.selection
    selection.max_files = _pick(_as_int(selection_data.get("max_files")), selection.max_files)
    selection.tree_cap = _pick(_as_int(selection_data.get("tree_cap")), selection.tree_cap)
    selection.local_max_file_bytes = _pick(
        _as_int(selection_data.get("local_max_file_bytes")), selection.local_max_file_bytes
    )

    rag_data = _as_dict(data.get("rag"))
    rag = config.rag
    rag.top_k = _pick(_as_int(rag_data.get("top_k")), rag.top_k)
    rag.lines_per_chunk = _pick(_as_int(rag_data.get("lines_per_chunk")), rag.lines_per_chunk)
    rag.overlap_lines = _pick(_as_int(rag_data.get("overlap_lines")), rag.overlap_lines)
    rag.max_workers = _pick(_as_int(rag_data.get("max_workers")), rag.max_workers)
    if rag.lines_per_chunk < 1 or not 0 <= rag.overlap_lines < rag.lines_per_chunk:
        raise ConfigError("rag.overlap_lines must be between 0 and rag.lines_per_chunk - 1")
    if rag.max_workers < 1:
        raise ConfigError("rag.max_workers must be at least 1")

    prompt_data = _as_dict(data.get("prompt"))
    templates_dir = _as_str(prompt_data.get("templates_dir"))
    config.prompt.templates_dir = root / templates_dir if templates_dir else None
    config.prompt.task_instruction = _as_str(prompt_data.get("task_instruction"))

    generator = _as_str(data.get("generator"))
    if generator is not None:
        generator = generator.strip().lower()
        if generator not in GENERATORS:
            raise ConfigError(f"generator must be one of {', '.join(GENERATORS)}, got {generator!r}")
        config.generator = generator

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _pick(value: Any, default: Any) -> Any:
    return default if value is None else value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


__all__ = [
    "AppConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "GENERATORS",
    "GeminiConfig",
    "GitHubConfig",
    "OllamaConfig",
    "PromptConfig",
    "RAGConfig",
    "SelectionConfig",
    "load_config",
]
