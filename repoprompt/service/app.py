"""FastAPI application entrypoint for repoprompt service mode."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import AppConfig, ConfigError, load_config
from ..errors import (
    EmbeddingError,
    GenerationError,
    InvalidRequestError,
    InvalidTargetError,
    RepoPromptError,
    TreeSourceError,
)
from ..models import PipelineResult
from ..pipeline import GenerationRequest, Pipeline
from ..selection.constants import DEFAULT_MAX_FILES
from ..stores import SnapshotCache


class GenerateRequest(BaseModel):
    target: str
    branch: Optional[str] = None
    token: Optional[str] = None
    max_files: int = DEFAULT_MAX_FILES
    use_rag: bool = False
    rag_query: Optional[str] = None
    embedding_model: Optional[str] = None
    embedder: str = "ollama"
    top_k: Optional[int] = None
    task_instruction: Optional[str] = None
    additional_context: Optional[str] = None
    analyze_issues: bool = False
    summarize: bool = False
    generator: Optional[str] = None
    use_cache: bool = True


class GenerateResponse(BaseModel):
    document: str
    output: str
    is_truncated: bool
    selected_files: List[str]
    failed_files: List[str]
    failed_chunks: int = 0


class ModelsResponse(BaseModel):
    connected: bool
    base_url: str
    models: List[str]


class HealthResponse(BaseModel):
    status: str


def _pipeline_factory_for(config: AppConfig) -> Callable[[], Pipeline]:
    # One cache per app, shared by the pipelines built for each request.
    cache = SnapshotCache()

    def _factory() -> Pipeline:
        return Pipeline(config, cache=cache)

    return _factory


def create_app(
    pipeline_factory: Callable[[], Pipeline] | None = None,
    *,
    config: AppConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing repoprompt operations."""

    factory = pipeline_factory or _pipeline_factory_for(config or load_config())
    app = FastAPI(title="RepoPrompt Service", version="1.0.0")
    # Runs are serialized so the snapshot cache is never replaced mid-read.
    run_lock = threading.Lock()

    async def get_pipeline() -> Pipeline:
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        pipeline: Pipeline = Depends(get_pipeline),
    ) -> GenerateResponse:
        request = GenerationRequest(**payload.model_dump())

        def _run() -> PipelineResult:
            with run_lock:
                return pipeline.run(request)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return GenerateResponse(
            document=result.document,
            output=result.output,
            is_truncated=result.is_truncated,
            selected_files=result.selected_files,
            failed_files=result.failed_files,
            failed_chunks=result.failed_chunks,
        )

    @app.get("/ollama/models", response_model=ModelsResponse)
    async def ollama_models(pipeline: Pipeline = Depends(get_pipeline)) -> ModelsResponse:
        loop = asyncio.get_running_loop()
        connected, base_url, models = await loop.run_in_executor(None, pipeline.ollama_status)
        return ModelsResponse(connected=connected, base_url=base_url, models=models)

    async def bad_request_handler(_: Any, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    async def upstream_error_handler(_: Any, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    for error_type in (InvalidTargetError, InvalidRequestError, ConfigError):
        app.add_exception_handler(error_type, bad_request_handler)
    for error_type in (TreeSourceError, EmbeddingError, GenerationError):
        app.add_exception_handler(error_type, upstream_error_handler)

    @app.exception_handler(RepoPromptError)
    async def repoprompt_error_handler(_: Any, exc: RepoPromptError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1",
    port: int = 8000,
    *,
    config: AppConfig | None = None,
) -> None:  # pragma: no cover - integration path
    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
