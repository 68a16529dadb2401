"""Ingestion pipeline engine and its built-in stages."""

from ingestkit.pipeline.builder import IngestionPipeline, IngestionPipelineBuilder, MiddlewareFactory
from ingestkit.pipeline.middleware import (
    ChunkingMiddleware,
    DocumentProcessorMiddleware,
    ErrorHandlingMiddleware,
    PipelineStage,
    ReaderMiddleware,
    WriterMiddleware,
)

__all__ = [
    "ChunkingMiddleware",
    "DocumentProcessorMiddleware",
    "ErrorHandlingMiddleware",
    "IngestionPipeline",
    "IngestionPipelineBuilder",
    "MiddlewareFactory",
    "PipelineStage",
    "ReaderMiddleware",
    "WriterMiddleware",
]
