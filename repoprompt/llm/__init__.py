"""Generation backends (Gemini and local Ollama)."""

from .gemini import GeminiRunner
from .ollama import GenerationOptions, OllamaClient, OllamaSummarizer

__all__ = ["GeminiRunner", "GenerationOptions", "OllamaClient", "OllamaSummarizer"]
