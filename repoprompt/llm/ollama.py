"""Client for a local Ollama server (generation, embeddings, model listing)."""

from __future__ import annotations

import json
import os
from http.client import HTTPException
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import EmbeddingError, GenerationError
from ..logging import get_logger

_LOGGER = get_logger("llm.ollama")

SUMMARY_INPUT_CHARS = 8000
SUMMARY_FALLBACK_CHARS = 500

SUMMARY_PROMPT = (
    "Please summarize the following file content in a few sentences, extracting only the most "
    "important information relevant for understanding the architecture, purpose, and key logic "
    "of the code. Ignore boilerplate.\n\nContent:\n{content}"
)


@dataclass
class GenerationOptions:
    """Sampling options forwarded to ``/api/generate``."""

    num_ctx: Optional[int] = 8192
    num_predict: Optional[int] = 2048
    temperature: Optional[float] = 0.5

    def as_payload(self) -> Dict[str, object]:
        options: Dict[str, object] = {}
        if self.num_ctx is not None:
            options["num_ctx"] = self.num_ctx
        if self.num_predict is not None:
            options["num_predict"] = self.num_predict
        if self.temperature is not None:
            options["temperature"] = self.temperature
        return options


class OllamaClient:
    """Talks to the Ollama REST API over plain HTTP."""

    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_MODEL = "llama3"
    ENV_BASE_URL_KEYS = ("REPOPROMPT_OLLAMA_URL", "OLLAMA_HOST")

    def __init__(
        self,
        base_url: str | None = None,
        *,
        model: str | None = None,
        options: GenerationOptions | None = None,
        request_timeout: Optional[float] = 3600.0,
    ) -> None:
        self.base_url = self._resolve_base_url(base_url)
        self.model = model or self.DEFAULT_MODEL
        self.options = options or GenerationOptions()
        self.request_timeout = request_timeout

    # ------------------------------------------------------------------
    # Public API

    def check_connection(self) -> bool:
        """Return True when the server answers ``/api/tags``."""
        try:
            self._get_json("/api/tags", timeout=5.0)
        except RuntimeError:
            return False
        return True

    def list_models(self) -> List[str]:
        try:
            payload = self._get_json("/api/tags", timeout=10.0)
        except RuntimeError as exc:
            _LOGGER.debug("Unable to list Ollama models: %s", exc)
            return []
        models = payload.get("models")
        if not isinstance(models, list):
            return []
        names: List[str] = []
        for entry in models:
            if isinstance(entry, dict) and isinstance(entry.get("name"), str):
                names.append(entry["name"])
        return names

    def generate(self, prompt: str, *, options: GenerationOptions | None = None) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": (options or self.options).as_payload(),
        }
        try:
            data = self._post_json("/api/generate", payload)
        except RuntimeError as exc:
            raise GenerationError(f"Ollama generation failed: {exc}") from exc
        response = data.get("response")
        if not isinstance(response, str):
            raise GenerationError("Ollama generation returned no response field")
        return response

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Generate with the client's default options; matches the runner interface."""
        if system:
            prompt = f"{system.strip()}\n\n{prompt}"
        return self.generate(prompt)

    def embed(self, text: str, *, model: str) -> List[float]:
        payload = {"model": model, "prompt": text}
        try:
            data = self._post_json("/api/embeddings", payload)
        except RuntimeError as exc:
            raise EmbeddingError(f"Embedding failed: {exc}") from exc
        vector = data.get("embedding")
        if not isinstance(vector, list):
            raise EmbeddingError("No embedding field in response")
        try:
            return [float(value) for value in vector]
        except (TypeError, ValueError) as exc:
            raise EmbeddingError("Embedding contained non-numeric values") from exc

    # ------------------------------------------------------------------
    # HTTP helpers

    def _get_json(self, endpoint: str, *, timeout: float | None = None) -> Dict[str, object]:
        request = Request(f"{self.base_url}{endpoint}", method="GET")
        return self._send(request, timeout=timeout)

    def _post_json(self, endpoint: str, payload: Dict[str, object]) -> Dict[str, object]:
        data = json.dumps(payload).encode("utf-8")
        request = Request(
            f"{self.base_url}{endpoint}",
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        return self._send(request, timeout=self.request_timeout)

    @staticmethod
    def _send(request: Request, *, timeout: float | None) -> Dict[str, object]:
        try:
            with urlopen(request, timeout=timeout or 60.0) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise RuntimeError(f"Ollama returned status {exc.code}: {message}") from exc
        except URLError as exc:
            raise RuntimeError(f"Ollama is unreachable: {exc.reason}") from exc
        except OSError as exc:
            raise RuntimeError(f"Ollama request failed: {exc}") from exc
        except HTTPException as exc:
            raise RuntimeError(f"Ollama response could not be read: {exc!r}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RuntimeError("Ollama returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise RuntimeError("Ollama returned an unexpected payload")
        return payload

    @classmethod
    def _resolve_base_url(cls, base_url: str | None) -> str:
        if base_url:
            return base_url.rstrip("/")
        env_value = _first_env_value(cls.ENV_BASE_URL_KEYS)
        if env_value:
            if not env_value.startswith(("http://", "https://")):
                env_value = f"http://{env_value}"
            return env_value.rstrip("/")
        return cls.DEFAULT_BASE_URL


class OllamaSummarizer:
    """Condenses file contents with a small local generation call.

    A failed call never aborts the run: the summary degrades to a marked excerpt of
    the original text.
    """

    def __init__(
        self,
        client: OllamaClient,
        *,
        options: GenerationOptions | None = None,
    ) -> None:
        self.client = client
        self.options = options or GenerationOptions(num_predict=250, temperature=0.3)

    def summarize(self, text: str) -> str:
        if not text or not text.strip():
            return ""
        prompt = SUMMARY_PROMPT.format(content=text[:SUMMARY_INPUT_CHARS])
        try:
            return self.client.generate(prompt, options=self.options)
        except GenerationError as exc:
            _LOGGER.warning("Ollama summarization failed: %s", exc)
            return f"[Ollama Summarization Failed] {text[:SUMMARY_FALLBACK_CHARS]}..."


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


__all__ = ["GenerationOptions", "OllamaClient", "OllamaSummarizer"]
