"""Progress reporting hooks called at pipeline milestones."""

from __future__ import annotations

import logging
from typing import Callable, List, Protocol

from .logging import get_logger


class ProgressSink(Protocol):
    """Receives human-readable status messages synchronously."""

    def report(self, message: str) -> None:
        ...


class LoggingProgress:
    """Forwards progress messages to the ``repoprompt.progress`` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("progress")

    def report(self, message: str) -> None:
        self.logger.info("%s", message)


class CallbackProgress:
    """Adapts a plain callable to the sink interface."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self.callback = callback

    def report(self, message: str) -> None:
        self.callback(message)


class RecordingProgress:
    """Keeps every message; handy for service responses and tests."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)


__all__ = ["CallbackProgress", "LoggingProgress", "ProgressSink", "RecordingProgress"]
