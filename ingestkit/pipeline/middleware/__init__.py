"""Built-in ingestion stages, listed in their usual registration order."""

from ingestkit.pipeline.middleware.base import PipelineStage
from ingestkit.pipeline.middleware.chunking import ChunkingMiddleware
from ingestkit.pipeline.middleware.document_processor import DocumentProcessorMiddleware
from ingestkit.pipeline.middleware.error_handling import ErrorHandlingMiddleware
from ingestkit.pipeline.middleware.reader import ReaderMiddleware
from ingestkit.pipeline.middleware.writer import WriterMiddleware

__all__ = [
    "ChunkingMiddleware",
    "DocumentProcessorMiddleware",
    "ErrorHandlingMiddleware",
    "PipelineStage",
    "ReaderMiddleware",
    "WriterMiddleware",
]
