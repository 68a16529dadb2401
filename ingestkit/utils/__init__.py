"""Utility modules for ingestkit.

- **errors** -- Exception hierarchy rooted at IngestKitError; each failure
  class in the pipeline taxonomy has its own subclass so callers can handle
  failures granularly.
- **cancellation** -- asyncio-based cancellation token threaded through
  every stage and the retry backoff.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text** -- text normalization helpers used by document processors.
"""

from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import (
    ChunkingError,
    ConfigurationError,
    DecodingError,
    DocumentSealedError,
    DuplicateDocumentError,
    EmbeddingServiceError,
    IngestionCancelledError,
    IngestKitError,
    LLMError,
    PipelineError,
    TokenizerError,
    WriterError,
)
from ingestkit.utils.logging import configure_logging, get_logger, run_context

__all__ = [
    "CancellationToken",
    "ChunkingError",
    "ConfigurationError",
    "DecodingError",
    "DocumentSealedError",
    "DuplicateDocumentError",
    "EmbeddingServiceError",
    "IngestKitError",
    "IngestionCancelledError",
    "LLMError",
    "PipelineError",
    "TokenizerError",
    "WriterError",
    "configure_logging",
    "get_logger",
    "run_context",
]
