"""Assembles the final bounded prompt document from a repository snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..models import RepoSnapshot, SourceFile
from .constants import (
    ADDITIONAL_CONTEXT_INSTRUCTION,
    ANALYZE_ISSUES_INSTRUCTION,
    DEFAULT_TASK_INSTRUCTION,
    RAG_NOTICE,
    SUMMARY_NOTICE,
    TEXT_BLOCK_LIMIT,
    TREE_LINE_LIMIT,
)

TEMPLATE_NAME = "prompt.j2"


@dataclass(frozen=True)
class FileBlock:
    """One ``--- path ---`` section of the document."""

    path: str
    content: str


def truncate_text(text: str | None, limit: int = TEXT_BLOCK_LIMIT) -> str:
    if not text:
        return ""
    return text[:limit]


class PromptAssembler:
    """Renders snapshots through ``templates/prompt.j2``.

    Every block is cut to its fixed budget before rendering, so the document size is
    bounded whatever the repository holds. Section order is fixed: instruction,
    identity, tree, README, dependencies, files, additional context, issue analysis.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def assemble(
        self,
        snapshot: RepoSnapshot,
        task_instruction: str | None = None,
        additional_context: str | None = None,
        analyze_issues: bool = False,
        *,
        files: Optional[Sequence[SourceFile]] = None,
        summarized: bool = False,
        retrieved: bool = False,
    ) -> str:
        """Return the prompt document for ``snapshot``.

        ``files`` overrides the snapshot's selected files, e.g. with ranked chunks or
        summaries; order is preserved as given.
        """
        instruction = (task_instruction or "").strip() or DEFAULT_TASK_INSTRUCTION
        context = (additional_context or "").strip()
        tree, tree_note = self._budget_tree(snapshot.tree, snapshot.is_truncated)
        blocks = self._file_blocks(files if files is not None else snapshot.source_files)

        template = self._env.get_template(TEMPLATE_NAME)
        rendered = template.render(
            task_instruction=instruction,
            additional_context=context,
            additional_context_instruction=ADDITIONAL_CONTEXT_INSTRUCTION,
            notice=self._notice(summarized=summarized, retrieved=retrieved),
            info=snapshot.info,
            tree=tree,
            tree_truncated=snapshot.is_truncated or bool(tree_note),
            tree_note=tree_note,
            readme=truncate_text(snapshot.readme),
            dependencies=truncate_text(snapshot.dependencies),
            files=blocks,
            analyze_issues=analyze_issues,
            analyze_issues_instruction=ANALYZE_ISSUES_INSTRUCTION,
        )
        return rendered.strip() + "\n"

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _budget_tree(tree: Sequence[str], is_truncated: bool) -> tuple[List[str], str]:
        shown = list(tree[:TREE_LINE_LIMIT])
        hidden = len(tree) - len(shown)
        if hidden > 0:
            return shown, f"... ({hidden} more entries not shown)"
        if is_truncated:
            return shown, "... (tree truncated)"
        return shown, ""

    @staticmethod
    def _file_blocks(files: Sequence[SourceFile]) -> List[FileBlock]:
        return [FileBlock(path=item.path, content=truncate_text(item.content)) for item in files]

    @staticmethod
    def _notice(*, summarized: bool, retrieved: bool) -> str:
        notes = []
        if retrieved:
            notes.append(RAG_NOTICE)
        if summarized:
            notes.append(SUMMARY_NOTICE)
        return "\n".join(notes)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = Path(__file__).with_name("templates")
        if str(default_dir) not in directories:
            directories.append(str(default_dir))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


__all__ = ["FileBlock", "PromptAssembler", "truncate_text"]
