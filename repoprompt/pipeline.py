"""End-to-end pipeline: collect a snapshot, optionally retrieve, assemble, generate."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from .config import AppConfig, GENERATORS
from .errors import ContentFetchError, InvalidRequestError
from .llm import GeminiRunner, GenerationOptions, OllamaClient, OllamaSummarizer
from .logging import get_logger
from .models import PipelineResult, RepoSnapshot, SourceFile
from .progress import LoggingProgress, ProgressSink
from .prompting import PromptAssembler
from .rag import EmbeddingRanker, EmbeddingSource, HashingEmbedder, LineChunker, OllamaEmbedder, clamp_top_k
from .selection import FileSelector, PathFilter, budget_tree, clamp_max_files
from .selection.constants import DEFAULT_MAX_FILES, DEPENDENCY_MANIFESTS
from .sources import RepositorySource, open_source
from .stores import SnapshotCache, request_fingerprint

EMBEDDERS = ("ollama", "local")


class Generator(Protocol):
    """Anything that turns an assembled prompt into generated text."""

    def run(self, prompt: str, *, system: str | None = None) -> str:
        ...


@dataclass
class GenerationRequest:
    """Parameters of one generation run, as accepted by the CLI and the service."""

    target: str
    branch: Optional[str] = None
    token: Optional[str] = None
    max_files: Any = DEFAULT_MAX_FILES
    use_rag: bool = False
    rag_query: Optional[str] = None
    embedding_model: Optional[str] = None
    embedder: str = "ollama"
    top_k: Any = None
    task_instruction: Optional[str] = None
    additional_context: Optional[str] = None
    analyze_issues: bool = False
    summarize: bool = False
    generator: Optional[str] = None
    use_cache: bool = True


SourceFactory = Callable[[GenerationRequest], RepositorySource]


class Pipeline:
    """Coordinates one request from target resolution to the final document.

    Collaborators are injected so the pipeline never cares whether files come from
    GitHub or disk, or which model embeds and generates. Every network call happens
    sequentially in selection order.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        source_factory: SourceFactory | None = None,
        embedder: EmbeddingSource | None = None,
        generator: Generator | None = None,
        summarizer: OllamaSummarizer | None = None,
        cache: SnapshotCache | None = None,
        progress: ProgressSink | None = None,
        path_filter: PathFilter | None = None,
        selector: FileSelector | None = None,
        assembler: PromptAssembler | None = None,
    ) -> None:
        self.config = config or AppConfig(root=Path.cwd())
        self.source_factory = source_factory or self._default_source
        self.cache = cache if cache is not None else SnapshotCache()
        self.progress = progress or LoggingProgress()
        self.path_filter = path_filter or PathFilter()
        self.selector = selector or FileSelector()
        self.assembler = assembler or PromptAssembler(self.config.prompt.templates_dir)
        self.logger = get_logger("pipeline")
        self._embedder = embedder
        self._generator = generator
        self._summarizer = summarizer
        self._ollama: OllamaClient | None = None

    # ------------------------------------------------------------------
    # Public API

    def run(self, request: GenerationRequest) -> PipelineResult:
        """Produce the assembled document (and generated output when requested)."""
        query = (request.rag_query or "").strip()
        if request.use_rag and not query:
            raise InvalidRequestError("A RAG query is required when semantic retrieval is enabled.")
        generator_name = self._generator_name(request)

        snapshot = self.collect(request)
        files: Sequence[SourceFile] = snapshot.source_files
        failed_chunks = 0

        if request.use_rag:
            files, failed_chunks = self._retrieve(snapshot, request, query)

        readme = snapshot.readme
        dependencies = snapshot.dependencies
        if request.summarize:
            readme, dependencies, files = self._summarize(snapshot, files, summarize_files=not request.use_rag)

        assembled_from = replace(snapshot, readme=readme, dependencies=dependencies)
        document = self.assembler.assemble(
            assembled_from,
            request.task_instruction or self.config.prompt.task_instruction,
            request.additional_context,
            request.analyze_issues,
            files=files,
            summarized=request.summarize,
            retrieved=request.use_rag,
        )

        output = document
        if generator_name != "none":
            self.progress.report(f"Generating system prompt with {generator_name}...")
            output = self._resolve_generator(generator_name).run(document)

        return PipelineResult(
            document=document,
            output=output,
            is_truncated=snapshot.is_truncated,
            selected_files=snapshot.selected_files,
            failed_files=list(snapshot.failed_files),
            failed_chunks=failed_chunks,
        )

    def collect(self, request: GenerationRequest) -> RepoSnapshot:
        """Fetch, filter, rank and download the files for ``request``.

        Repository info and tree failures propagate. File and manifest failures are
        logged and recorded in ``failed_files``; a missing README leaves it empty.
        """
        source = self.source_factory(request)
        max_files = clamp_max_files(request.max_files)
        tree_cap = self.config.selection.tree_cap
        key = request_fingerprint(
            source.fingerprint(),
            max_files=max_files,
            tree_cap=tree_cap,
            has_token=bool(request.token),
        )
        if request.use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                self.logger.info("Reusing cached snapshot for %s", cached.info.full_name)
                return cached

        self.progress.report("Fetching repository data...")
        info = source.describe()
        listing = source.list_tree()
        eligible = self.path_filter.filter(listing.blob_paths())
        self.logger.debug(
            "%d of %d tree entries are eligible", len(eligible), len(listing.entries)
        )
        budget = budget_tree(eligible, tree_cap)

        failed: List[str] = []
        readme = self._fetch_readme(source)
        dependencies = self._fetch_dependencies(source, eligible, failed)

        selected = self.selector.select(eligible, max_files)
        source_files: List[SourceFile] = []
        for path in selected:
            self.progress.report(f"Fetching {path}...")
            try:
                content = source.fetch(path)
            except ContentFetchError as exc:
                self.logger.warning("Skipping %s: %s", path, exc.reason)
                failed.append(path)
                continue
            source_files.append(SourceFile(path=path, content=content))

        snapshot = RepoSnapshot(
            info=info,
            tree=budget.paths,
            is_truncated=budget.is_truncated or listing.upstream_truncated,
            readme=readme,
            dependencies=dependencies,
            source_files=tuple(source_files),
            failed_files=tuple(failed),
        )
        self.logger.info(
            "Collected %s: %d files selected, %d failed", info.full_name, len(source_files), len(failed)
        )
        self.cache.store(key, snapshot)
        return snapshot

    def ollama_status(self) -> Tuple[bool, str, List[str]]:
        """Return connectivity, base URL and installed models of the Ollama server."""
        client = self._ollama_client()
        if not client.check_connection():
            return False, client.base_url, []
        return True, client.base_url, client.list_models()

    # ------------------------------------------------------------------
    # Collection helpers

    def _default_source(self, request: GenerationRequest) -> RepositorySource:
        return open_source(
            request.target,
            branch=request.branch,
            token=request.token or self.config.github.token,
            request_timeout=self.config.github.request_timeout,
            max_file_bytes=self.config.selection.local_max_file_bytes,
        )

    def _fetch_readme(self, source: RepositorySource) -> str:
        try:
            return source.fetch_readme()
        except ContentFetchError as exc:
            self.logger.info("No README available: %s", exc.reason)
            return ""

    def _fetch_dependencies(self, source: RepositorySource, eligible: Sequence[str], failed: List[str]) -> str:
        present = set(eligible)
        parts: List[str] = []
        for name in DEPENDENCY_MANIFESTS:
            if name not in present:
                continue
            try:
                content = source.fetch(name)
            except ContentFetchError as exc:
                self.logger.warning("Skipping manifest %s: %s", name, exc.reason)
                failed.append(name)
                continue
            parts.append(f"\n--- {name} ---\n{content}\n")
        return "".join(parts)

    # ------------------------------------------------------------------
    # Retrieval, summarization and generation

    def _retrieve(
        self, snapshot: RepoSnapshot, request: GenerationRequest, query: str
    ) -> Tuple[List[SourceFile], int]:
        rag = self.config.rag
        chunker = LineChunker(lines_per_chunk=rag.lines_per_chunk, overlap_lines=rag.overlap_lines)
        chunks = chunker.chunk_files(snapshot.source_files)
        self.progress.report(f"Split {len(snapshot.source_files)} files into {len(chunks)} chunks")

        ranker = EmbeddingRanker(
            self._resolve_embedder(request),
            top_k=clamp_top_k(request.top_k if request.top_k is not None else rag.top_k),
            max_workers=rag.max_workers,
            progress=self.progress,
        )
        outcome = ranker.rank_detailed(chunks, query)
        files = [SourceFile(path=item.label, content=item.annotated_content) for item in outcome.ranked]
        return files, len(outcome.failed)

    def _summarize(
        self,
        snapshot: RepoSnapshot,
        files: Sequence[SourceFile],
        *,
        summarize_files: bool,
    ) -> Tuple[str, str, Sequence[SourceFile]]:
        summarizer = self._resolve_summarizer()
        summarized: Sequence[SourceFile] = files
        if summarize_files:
            condensed: List[SourceFile] = []
            for item in files:
                self.progress.report(f"Summarizing {item.path} with Ollama...")
                condensed.append(SourceFile(path=item.path, content=summarizer.summarize(item.content)))
            summarized = condensed
        self.progress.report("Summarizing README and dependencies with Ollama...")
        return summarizer.summarize(snapshot.readme), summarizer.summarize(snapshot.dependencies), summarized

    def _generator_name(self, request: GenerationRequest) -> str:
        name = (request.generator or self.config.generator or "none").strip().lower()
        if name not in GENERATORS:
            raise InvalidRequestError(f"Unknown generator {name!r}; expected one of {', '.join(GENERATORS)}")
        return name

    def _resolve_generator(self, name: str) -> Generator:
        if self._generator is not None:
            return self._generator
        if name == "gemini":
            gemini = self.config.gemini
            return GeminiRunner(gemini.api_key, model=gemini.model, request_timeout=gemini.request_timeout)
        ollama = self.config.ollama
        client = self._ollama_client()
        client.options = GenerationOptions(
            num_ctx=ollama.num_ctx,
            num_predict=ollama.final_num_predict,
            temperature=ollama.temperature,
        )
        return client

    def _resolve_embedder(self, request: GenerationRequest) -> EmbeddingSource:
        if self._embedder is not None:
            return self._embedder
        kind = (request.embedder or "ollama").strip().lower()
        if kind not in EMBEDDERS:
            raise InvalidRequestError(f"Unknown embedder {kind!r}; expected one of {', '.join(EMBEDDERS)}")
        if kind == "local":
            return HashingEmbedder()
        model = request.embedding_model or self.config.ollama.embedding_model
        return OllamaEmbedder(self._ollama_client(), model=model)

    def _resolve_summarizer(self) -> OllamaSummarizer:
        if self._summarizer is None:
            ollama = self.config.ollama
            self._summarizer = OllamaSummarizer(
                self._ollama_client(),
                options=GenerationOptions(
                    num_ctx=ollama.num_ctx,
                    num_predict=ollama.num_predict,
                    temperature=ollama.temperature,
                ),
            )
        return self._summarizer

    def _ollama_client(self) -> OllamaClient:
        if self._ollama is None:
            ollama = self.config.ollama
            self._ollama = OllamaClient(
                ollama.base_url,
                model=ollama.model,
                request_timeout=ollama.request_timeout,
            )
        return self._ollama


__all__ = ["EMBEDDERS", "GenerationRequest", "Generator", "Pipeline"]
