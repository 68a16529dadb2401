"""In-memory document writer.

Keeps every written document and its chunk list in a dict keyed by
document id.  Suitable for tests, dry runs and the CLI's report mode;
persistent stores implement :class:`IDocumentWriter` the same way.
"""

from __future__ import annotations

import structlog

from ingestkit.interfaces.document_writer import IDocumentWriter
from ingestkit.models.ingestion import DocumentChunk, IngestionDocument
from ingestkit.utils.cancellation import CancellationToken

logger = structlog.get_logger(logger_name=__name__)


class InMemoryDocumentWriter(IDocumentWriter):
    """Stores ``(document, chunks)`` pairs in write order."""

    def __init__(self) -> None:
        self._records: dict[str, tuple[IngestionDocument, list[DocumentChunk]]] = {}

    async def write(
        self,
        document: IngestionDocument,
        chunks: list[DocumentChunk],
        cancellation: CancellationToken,
    ) -> None:
        cancellation.raise_if_cancelled()
        self._records[document.id] = (document, list(chunks))
        logger.debug("document_written", document_id=document.id, chunks=len(chunks))

    def get_provider_name(self) -> str:
        return "in-memory"

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    @property
    def document_ids(self) -> list[str]:
        return list(self._records)

    def get_document(self, document_id: str) -> IngestionDocument | None:
        record = self._records.get(document_id)
        return record[0] if record else None

    def get_chunks(self, document_id: str) -> list[DocumentChunk]:
        record = self._records.get(document_id)
        return list(record[1]) if record else []

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
