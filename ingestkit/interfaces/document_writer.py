"""Abstract base class for the persistence collaborator.

The pipeline owns no storage format: the writer stage hands each document
and its ordered chunk list to an injected :class:`IDocumentWriter`, and any
exception it raises travels up the chain as an ordinary stage failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestkit.models.ingestion import DocumentChunk, IngestionDocument
    from ingestkit.utils.cancellation import CancellationToken


# Concrete implementations: InMemoryDocumentWriter
# Located in: ingestkit/providers/writer/
class IDocumentWriter(ABC):
    """Contract for persisting a document together with its chunks."""

    @abstractmethod
    async def write(
        self,
        document: IngestionDocument,
        chunks: list[DocumentChunk],
        cancellation: CancellationToken,
    ) -> None:
        """Persist *document* and its *chunks* (possibly an empty list).

        Raises
        ------
        ingestkit.utils.errors.WriterError
            If the underlying store rejects the write.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this writer."""
