"""Command-line front end for running the ingestion pipeline on a directory.

Usage::

    python -m ingestkit.cli ingest --path ./docs

    python -m ingestkit.cli ingest --path ./docs --strategy header \\
        --max-tokens 512 --overlap 32 --show-chunks

    python -m ingestkit.cli config --config config/ingestkit.yaml

The ``ingest`` command builds the standard chain

    ErrorHandling -> Reader -> DocumentProcessor -> Chunking -> Writer

from settings (YAML file, ``.env``, ``INGESTKIT_*`` variables) and
command-line overrides, runs it once and prints a summary.  Documents are
written to an in-memory writer, so the command reports what would be
stored.  The exit code is 1 when any error was recorded.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from ingestkit.config.loader import load_settings
from ingestkit.config.settings import Settings
from ingestkit.interfaces.document_source import IDocumentSource
from ingestkit.interfaces.document_writer import IDocumentWriter
from ingestkit.models.pipeline import IngestionContext
from ingestkit.pipeline.builder import IngestionPipeline, IngestionPipelineBuilder
from ingestkit.pipeline.middleware import (
    ChunkingMiddleware,
    DocumentProcessorMiddleware,
    ErrorHandlingMiddleware,
    ReaderMiddleware,
    WriterMiddleware,
)
from ingestkit.providers.source.local_file_provider import FileSystemDocumentSource
from ingestkit.providers.writer.in_memory_writer import InMemoryDocumentWriter
from ingestkit.services.chunking.factory import ChunkingStrategyFactory
from ingestkit.services.chunking.section import MarkdownSectionDetector
from ingestkit.services.decoders import default_decoders
from ingestkit.services.processors.normalization import TextNormalizationProcessor
from ingestkit.services.token_counters import create_token_counter
from ingestkit.utils.errors import ConfigurationError
from ingestkit.utils.logging import configure_logging


def build_pipeline(
    app_settings: Settings,
    source: IDocumentSource,
    writer: IDocumentWriter,
) -> IngestionPipeline:
    """Assemble the standard ingestion chain from *app_settings*.

    Raises
    ------
    ConfigurationError
        If the settings describe an invalid budget, tokenizer or strategy.
    """
    options = app_settings.chunking_options()
    token_counter = create_token_counter(app_settings.tokenizer, app_settings.tokenizer_model)
    strategy = ChunkingStrategyFactory.create(
        app_settings.chunking_strategy,
        options,
        token_counter,
        section_detector=MarkdownSectionDetector(app_settings.section_heading_level),
        similarity_threshold=app_settings.semantic_similarity_threshold,
    )

    decoders = {
        extension: decoder
        for extension, decoder in default_decoders().items()
        if extension in {ext.lower() for ext in app_settings.input_extensions}
    }
    if not decoders:
        raise ConfigurationError(
            f"No decoder supports the configured extensions {app_settings.input_extensions}"
        )

    return (
        IngestionPipelineBuilder()
        .use(ErrorHandlingMiddleware())
        .use(ReaderMiddleware(source, decoders))
        .use(DocumentProcessorMiddleware([TextNormalizationProcessor()]))
        .use(ChunkingMiddleware(strategy))
        .use(WriterMiddleware(writer))
        .build()
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_ingest(args: argparse.Namespace, app_settings: Settings) -> int:
    """Run one ingestion over ``args.path`` and print the outcome."""
    source = FileSystemDocumentSource(args.path, extensions=app_settings.input_extensions)
    writer = InMemoryDocumentWriter()
    pipeline = build_pipeline(app_settings, source, writer)

    print(f"Ingesting directory: {source.root}")
    print(
        f"  Strategy: {app_settings.chunking_strategy} | "
        f"Max tokens: {app_settings.max_tokens_per_chunk} | "
        f"Overlap: {app_settings.overlap_tokens} | "
        f"Tokenizer: {app_settings.tokenizer}"
    )

    context = await pipeline.execute(IngestionContext())
    summary = context.summary()

    print("\nIngestion complete:")
    print(f"  Run ID:          {summary.run_id}")
    print(f"  Documents:       {summary.documents}")
    print(f"  Chunked:         {summary.chunked_documents}")
    print(f"  Chunks created:  {summary.chunks}")
    print(f"  Errors:          {summary.errors}")
    print(f"  Time:            {summary.duration_seconds:.2f}s")

    if args.show_chunks:
        for document_id in writer.document_ids:
            chunks = writer.get_chunks(document_id)
            print(f"\n  {document_id} ({len(chunks)} chunks)")
            for chunk in chunks:
                preview = " ".join(chunk.content.split())[:60]
                print(f"    [{chunk.index}] {chunk.token_count:>5} tokens  {preview}")

    for error in context.errors:
        print(f"Error: {error}", file=sys.stderr)

    return 1 if context.has_errors else 0


def _handle_config(app_settings: Settings) -> int:
    """Print the resolved settings."""
    print("Resolved settings")
    print("=" * 40)
    for name, value in app_settings.model_dump().items():
        print(f"  {name:<30} {value}")
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m ingestkit.cli",
        description="Run the ingestkit document-ingestion pipeline.",
    )
    parser.add_argument(
        "--config",
        default="config/ingestkit.yaml",
        help="YAML configuration file (default: config/ingestkit.yaml, optional)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        dest="json_logs",
        help="Emit JSON log lines instead of console output",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # -- ingest --
    ingest_parser = subparsers.add_parser("ingest", help="Ingest every file in a directory")
    ingest_parser.add_argument("--path", required=True, help="Directory path")
    ingest_parser.add_argument(
        "--strategy",
        choices=["header", "section", "token"],
        help="Chunking strategy (overrides settings)",
    )
    ingest_parser.add_argument(
        "--max-tokens", type=int, dest="max_tokens", help="Maximum tokens per chunk"
    )
    ingest_parser.add_argument(
        "--overlap", type=int, help="Tokens shared by consecutive pieces of a forced split"
    )
    ingest_parser.add_argument(
        "--tokenizer",
        choices=["whitespace", "huggingface"],
        help="Token counter (overrides settings)",
    )
    ingest_parser.add_argument(
        "--show-chunks",
        action="store_true",
        dest="show_chunks",
        help="List every chunk after the run",
    )

    # -- config --
    subparsers.add_parser("config", help="Show the resolved settings")

    return parser


def _apply_overrides(app_settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "chunking_strategy": getattr(args, "strategy", None),
        "max_tokens_per_chunk": getattr(args, "max_tokens", None),
        "overlap_tokens": getattr(args, "overlap", None),
        "tokenizer": getattr(args, "tokenizer", None),
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    return app_settings.model_copy(update=update) if update else app_settings


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point.

    Parses the command line, resolves settings (YAML file, ``.env``,
    environment, then flags), configures logging and dispatches to the
    command handler.  Always exits through :func:`sys.exit`.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        app_settings = _apply_overrides(load_settings(args.config), args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(log_level=app_settings.log_level, json_output=args.json_logs)

    if args.command == "config":
        sys.exit(_handle_config(app_settings))

    try:
        exit_code = asyncio.run(_handle_ingest(args, app_settings))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
