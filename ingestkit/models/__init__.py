"""Pydantic models for ingestkit.

- **ingestion** -- documents, chunks, metadata values and the frozen
  option objects (ChunkingOptions, RetryPolicy).
- **pipeline** -- the run-scoped IngestionContext, the StageOutcome result
  type and the error/summary records.
"""

from ingestkit.models.ingestion import (
    ChunkingOptions,
    DocumentChunk,
    IngestionDocument,
    MetadataKeys,
    MetadataValue,
    RetryPolicy,
)
from ingestkit.models.pipeline import (
    IngestionContext,
    IngestionErrorRecord,
    IngestionRunSummary,
    StageOutcome,
)

__all__ = [
    "ChunkingOptions",
    "DocumentChunk",
    "IngestionContext",
    "IngestionDocument",
    "IngestionErrorRecord",
    "IngestionRunSummary",
    "MetadataKeys",
    "MetadataValue",
    "RetryPolicy",
    "StageOutcome",
]
