"""Abstract base classes for the raw-item source consumed by the reader stage.

A document source produces a lazy, finite, non-restartable sequence of
:class:`IIngestionFile` items.  Each item exposes a name, an extension and
an open-for-read operation; turning the bytes into a document is the job
of an :class:`~ingestkit.interfaces.document_decoder.IDocumentDecoder`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:
    from ingestkit.utils.cancellation import CancellationToken


class IIngestionFile(ABC):
    """A single raw item discovered by a document source."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the item, unique within its source (e.g. a relative path)."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """Extension including the leading dot, e.g. ``".md"``.  May be mixed case."""

    @abstractmethod
    async def open_read(self) -> BinaryIO:
        """Open the item for reading and return a binary stream.

        The caller owns the returned stream and must close it.
        """


# Concrete implementations: FileSystemDocumentSource
# Located in: ingestkit/providers/source/
class IDocumentSource(ABC):
    """Contract for anything that can enumerate raw items for ingestion."""

    @abstractmethod
    def read(self, cancellation: CancellationToken | None = None) -> AsyncIterator[IIngestionFile]:
        """Yield raw items one at a time.

        Implementations are typically async generators.  The sequence is
        consumed once per run; callers must not assume it can be restarted.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this source."""
