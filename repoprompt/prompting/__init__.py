"""Prompt document assembly."""

from .builder import PromptAssembler, truncate_text
from .constants import DEFAULT_TASK_INSTRUCTION, TEXT_BLOCK_LIMIT, TREE_LINE_LIMIT

__all__ = [
    "DEFAULT_TASK_INSTRUCTION",
    "PromptAssembler",
    "TEXT_BLOCK_LIMIT",
    "TREE_LINE_LIMIT",
    "truncate_text",
]
