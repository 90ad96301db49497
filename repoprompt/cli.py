"""CLI entrypoints for repoprompt commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import GENERATORS, load_config
from .errors import RepoPromptError
from .logging import configure_logging
from .pipeline import EMBEDDERS, GenerationRequest, Pipeline
from .selection.constants import DEFAULT_MAX_FILES

DEFAULT_OUTPUT_NAME = "gemini.md"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_quiet_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only log warnings and errors.",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .repoprompt.yml or its directory (defaults to the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoprompt",
        description="Turn a GitHub repository or local folder into a bounded LLM prompt.",
    )
    _add_verbose_option(parser)
    _add_quiet_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Select the most relevant files and assemble a prompt document.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_quiet_option(generate_parser, suppress_default=True)
    _add_config_option(generate_parser)
    generate_parser.add_argument(
        "target",
        help="GitHub URL (https://github.com/owner/repo) or path to a local directory.",
    )
    generate_parser.add_argument("--branch", help="Branch to read instead of the default branch.")
    generate_parser.add_argument("--token", help="GitHub token for private repositories or higher rate limits.")
    generate_parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help=f"Number of source files to include (clamped to 1-200, default {DEFAULT_MAX_FILES}).",
    )
    generate_parser.add_argument(
        "--rag-query",
        help="Enable semantic retrieval and rank code chunks against this query.",
    )
    generate_parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help="Number of chunks kept by semantic retrieval (clamped to 1-50).",
    )
    generate_parser.add_argument("--embedding-model", help="Ollama embedding model used for retrieval.")
    generate_parser.add_argument(
        "--embedder",
        choices=EMBEDDERS,
        default="ollama",
        help="Embedding backend: a local Ollama server or the offline hashing embedder.",
    )
    generate_parser.add_argument("--task", dest="task_instruction", help="Task instruction placed at the top.")
    generate_parser.add_argument(
        "--context",
        dest="additional_context",
        help="Additional context or future development directions.",
    )
    generate_parser.add_argument(
        "--analyze-issues",
        action="store_true",
        help="Ask the model to report bugs, security and performance issues.",
    )
    generate_parser.add_argument(
        "--summarize",
        action="store_true",
        help="Summarize README, dependencies and files with Ollama before assembly.",
    )
    generate_parser.add_argument(
        "--generator",
        choices=GENERATORS,
        default=None,
        help="Send the document to a model. 'none' prints the assembled document.",
    )
    generate_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=f"Write the result to this file (e.g. {DEFAULT_OUTPUT_NAME}) instead of stdout.",
    )

    models_parser = subparsers.add_parser("models", help="List models installed on the Ollama server.")
    _add_verbose_option(models_parser, suppress_default=True)
    _add_quiet_option(models_parser, suppress_default=True)
    _add_config_option(models_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_quiet_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoprompt commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    try:
        config = load_config(args.config)
    except RepoPromptError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "generate":
        request = GenerationRequest(
            target=args.target,
            branch=args.branch,
            token=args.token,
            max_files=args.max_files if args.max_files is not None else config.selection.max_files,
            use_rag=bool(args.rag_query),
            rag_query=args.rag_query,
            embedding_model=args.embedding_model,
            embedder=args.embedder,
            top_k=args.top_k,
            task_instruction=args.task_instruction,
            additional_context=args.additional_context,
            analyze_issues=bool(args.analyze_issues),
            summarize=bool(args.summarize),
            generator=args.generator,
        )
        try:
            result = Pipeline(config).run(request)
        except RepoPromptError as exc:
            parser.exit(1, f"repoprompt generate failed: {exc}\n")
        if result.failed_files:
            print(f"Skipped {len(result.failed_files)} file(s): {', '.join(result.failed_files)}", file=sys.stderr)
        if args.output is not None:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(result.output, encoding="utf-8")
            print(f"Prompt written to {args.output}", file=sys.stderr)
        else:
            sys.stdout.write(result.output)
    elif args.command == "models":
        connected, base_url, models = Pipeline(config).ollama_status()
        if not connected:
            parser.exit(1, f"Ollama is not reachable at {base_url}\n")
        if not models:
            print("No models installed.")
        for name in models:
            print(name)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


__all__ = ["main"]


if __name__ == "__main__":
    main(sys.argv[1:])
