"""Relevance-ranked repository snapshots assembled into LLM prompts."""

__version__ = "0.1.0"
