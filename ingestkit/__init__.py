"""ingestkit -- a pluggable document-ingestion pipeline.

Documents flow through a chain of middleware stages
(read -> process -> chunk -> write), each replaceable and independently
failable.  Chunking strategies split documents into token-bounded chunks,
and a retry decorator wraps remote AI calls with bounded exponential
backoff.

Typical use::

    from ingestkit import IngestionContext, IngestionPipelineBuilder
    from ingestkit.pipeline import ErrorHandlingMiddleware, ReaderMiddleware, ...

    pipeline = IngestionPipelineBuilder().use(...).build()
    context = await pipeline.execute(IngestionContext())
    if context.errors:
        ...
"""

from ingestkit.models import (
    ChunkingOptions,
    DocumentChunk,
    IngestionContext,
    IngestionDocument,
    IngestionErrorRecord,
    RetryPolicy,
    StageOutcome,
)
from ingestkit.pipeline import IngestionPipeline, IngestionPipelineBuilder
from ingestkit.utils.cancellation import CancellationToken

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "ChunkingOptions",
    "DocumentChunk",
    "IngestionContext",
    "IngestionDocument",
    "IngestionErrorRecord",
    "IngestionPipeline",
    "IngestionPipelineBuilder",
    "RetryPolicy",
    "StageOutcome",
    "__version__",
]
