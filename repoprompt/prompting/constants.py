"""Fixed budgets and instruction texts for prompt assembly."""

from __future__ import annotations

# Bounds on the assembled document, independent of upstream data size.
TREE_LINE_LIMIT = 500
TEXT_BLOCK_LIMIT = 2000

DEFAULT_TASK_INSTRUCTION = (
    "You are an expert software engineer and AI assistant. Based on the following repository "
    "information, generate a comprehensive system prompt suitable for further development of the "
    "project with an AI coding assistant. The prompt should be formatted as markdown, ready to be "
    "saved as `gemini.md`.\n"
    "\n"
    "Generate a system prompt that includes:\n"
    "1. The project's purpose and tech stack.\n"
    "2. The architectural patterns and conventions used.\n"
    "3. Instructions for the AI on how to assist with this specific codebase.\n"
    "4. Any specific rules or guidelines for contributing to this project."
)

ADDITIONAL_CONTEXT_INSTRUCTION = (
    "Also include specific instructions or considerations based on the provided "
    '"Additional Context / Future Development Directions".'
)

ANALYZE_ISSUES_INSTRUCTION = (
    "Additionally, analyze the provided source code for potential issues: bugs, security "
    "vulnerabilities, performance bottlenecks, and maintainability concerns. Add a dedicated "
    '"Known Issues & Improvement Opportunities" section listing each finding with the file it '
    "concerns and a suggested fix."
)

SUMMARY_NOTICE = (
    "Note: the README, dependency and source file contents below were summarized by a local "
    "model before assembly; they are condensed descriptions, not verbatim code."
)

RAG_NOTICE = (
    "Note: the source blocks below are the code fragments most semantically similar to the "
    "user's query, each annotated with its similarity score."
)


__all__ = [
    "ADDITIONAL_CONTEXT_INSTRUCTION",
    "ANALYZE_ISSUES_INSTRUCTION",
    "DEFAULT_TASK_INSTRUCTION",
    "RAG_NOTICE",
    "SUMMARY_NOTICE",
    "TEXT_BLOCK_LIMIT",
    "TREE_LINE_LIMIT",
]
