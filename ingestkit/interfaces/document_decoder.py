"""Abstract base class for per-extension document decoders.

The reader stage holds a registry mapping a lowercase extension (``".md"``)
to a decoder.  Items whose extension has no decoder are skipped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from ingestkit.interfaces.document_source import IIngestionFile
    from ingestkit.models.ingestion import IngestionDocument
    from ingestkit.utils.cancellation import CancellationToken


# Concrete implementations: PlainTextDecoder, MarkdownDecoder
# Located in: ingestkit/services/decoders/
class IDocumentDecoder(ABC):
    """Contract for turning a byte stream into an :class:`IngestionDocument`."""

    @abstractmethod
    async def decode(
        self,
        stream: BinaryIO,
        file: IIngestionFile,
        cancellation: CancellationToken,
    ) -> IngestionDocument:
        """Decode *stream* (opened from *file*) into a document.

        Raises
        ------
        ingestkit.utils.errors.DecodingError
            If the bytes cannot be decoded.
        """

    @abstractmethod
    def supported_extensions(self) -> tuple[str, ...]:
        """Return the lowercase extensions this decoder handles by default."""
