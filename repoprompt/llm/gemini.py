"""Gemini ``generateContent`` client used for the final generation step."""

from __future__ import annotations

import json
import os
from http.client import HTTPException
from typing import Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import GenerationError

_PLACEHOLDER_KEYS = {"YOUR_GEMINI_API_KEY_HERE"}


class GeminiRunner:
    """Sends an assembled prompt to the Gemini REST API and returns the text."""

    DEFAULT_MODEL = "gemini-3-flash-preview"
    API_ROOT = "https://generativelanguage.googleapis.com/v1beta/models"
    ENV_API_KEY_KEYS = ("GEMINI_API_KEY", "VITE_GEMINI_API_KEY")

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        request_timeout: Optional[float] = 120.0,
    ) -> None:
        self.api_key = self._resolve_api_key(api_key)
        self.model = model or self.DEFAULT_MODEL
        self.request_timeout = request_timeout

    @property
    def endpoint(self) -> str:
        return f"{self.API_ROOT}/{self.model}:generateContent"

    def run(self, prompt: str, *, system: str | None = None) -> str:
        if not self.api_key:
            raise GenerationError(
                "Gemini API key is missing. Set GEMINI_API_KEY or configure gemini.api_key."
            )
        text = f"{system.strip()}\n\n{prompt}" if system else prompt
        body = {"contents": [{"parts": [{"text": text}]}]}
        request = Request(
            self.endpoint,
            data=json.dumps(body).encode("utf-8"),
            headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.request_timeout or 120.0) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            raise GenerationError(f"Gemini API error ({exc.code}): {detail.strip() or exc.reason}") from exc
        except URLError as exc:
            raise GenerationError(f"Gemini API connection error: {exc.reason}") from exc
        except OSError as exc:
            raise GenerationError(f"Gemini API request failed: {exc}") from exc
        except HTTPException as exc:
            raise GenerationError(f"Gemini API response could not be read: {exc!r}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise GenerationError("Gemini API returned invalid JSON") from exc

        content = self._extract_text(payload)
        if not content:
            raise GenerationError("Failed to generate prompt: Gemini returned no text")
        return content

    @staticmethod
    def _extract_text(payload: object) -> str:
        if not isinstance(payload, dict):
            return ""
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0]
        if not isinstance(first, dict):
            return ""
        content = first.get("content")
        if not isinstance(content, dict):
            return ""
        parts = content.get("parts")
        if not isinstance(parts, list):
            return ""
        texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
        return "".join(texts)

    @classmethod
    def _resolve_api_key(cls, api_key: str | None) -> str | None:
        candidates: Sequence[str | None] = (api_key, *(os.getenv(key) for key in cls.ENV_API_KEY_KEYS))
        for candidate in candidates:
            if candidate and candidate.strip() and candidate.strip() not in _PLACEHOLDER_KEYS:
                return candidate.strip()
        return None


__all__ = ["GeminiRunner"]
