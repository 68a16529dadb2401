"""Document processor that cleans text before chunking."""

from __future__ import annotations

from ingestkit.interfaces.processors import IDocumentProcessor
from ingestkit.models.ingestion import IngestionDocument
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.text import normalize_text


class TextNormalizationProcessor(IDocumentProcessor):
    """Apply :func:`~ingestkit.utils.text.normalize_text` to the content."""

    async def process(
        self,
        document: IngestionDocument,
        cancellation: CancellationToken,
    ) -> IngestionDocument:
        cancellation.raise_if_cancelled()
        normalized = normalize_text(document.content)
        if normalized != document.content:
            document.content = normalized
        return document
