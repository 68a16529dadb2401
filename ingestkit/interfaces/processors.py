"""Abstract base classes for document and chunk processors.

Processors are pure-ish transform units applied strictly in configured
order, one at a time:

- :class:`IDocumentProcessor` enriches a whole document (content or
  metadata) before chunking.  Used by the reader stage (per extension)
  and by the document-processor stage (for every document).
- :class:`IChunkProcessor` transforms a document's ordered chunk list
  after chunking (e.g. summarization).  Chunks are frozen, so processors
  return new chunk instances instead of mutating.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestkit.models.ingestion import DocumentChunk, IngestionDocument
    from ingestkit.utils.cancellation import CancellationToken


# Concrete implementations: TextNormalizationProcessor, MetadataExtractionProcessor
# Located in: ingestkit/services/processors/
class IDocumentProcessor(ABC):
    """Contract for document-level enrichment."""

    @abstractmethod
    async def process(
        self,
        document: IngestionDocument,
        cancellation: CancellationToken,
    ) -> IngestionDocument:
        """Enrich *document* and return it.

        Implementations usually mutate *document* in place and return the
        same instance; returning a replacement with the same ``id`` is also
        allowed.
        """

    def get_processor_name(self) -> str:
        return type(self).__name__


# Concrete implementations: SummaryChunkProcessor
# Located in: ingestkit/services/processors/
class IChunkProcessor(ABC):
    """Contract for transforms over one document's ordered chunk list."""

    @abstractmethod
    async def process(
        self,
        chunks: list[DocumentChunk],
        cancellation: CancellationToken,
    ) -> list[DocumentChunk]:
        """Return the transformed chunk list.

        The returned list must keep the input order and must only contain
        chunks of the same document.
        """

    def get_processor_name(self) -> str:
        return type(self).__name__
