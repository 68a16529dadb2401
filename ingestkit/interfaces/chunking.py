"""Abstract base classes for chunking strategies and their collaborators.

- :class:`ITokenCounter` -- deterministic token counting.  Counting the
  same text twice must give the same result.
- :class:`ISectionDetector` -- splits text into logical sections for the
  section-based strategy.
- :class:`IChunkingStrategy` -- turns one document into an ordered list of
  chunks whose token counts never exceed the configured maximum.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestkit.models.ingestion import DocumentChunk, IngestionDocument
    from ingestkit.utils.cancellation import CancellationToken


# Concrete implementations: WhitespaceTokenCounter, HuggingFaceTokenCounter
# Located in: ingestkit/services/token_counters.py
class ITokenCounter(ABC):
    """Contract for counting tokens in a piece of text."""

    @abstractmethod
    def count(self, text: str) -> int:
        """Return the number of tokens in *text*.

        Raises
        ------
        ingestkit.utils.errors.TokenizerError
            If the underlying tokenizer fails.
        """

    def get_counter_name(self) -> str:
        return type(self).__name__


# Concrete implementations: MarkdownSectionDetector
# Located in: ingestkit/services/chunking/section.py
class ISectionDetector(ABC):
    """Contract for splitting text into ordered logical sections."""

    @abstractmethod
    def split(self, text: str) -> list[str]:
        """Return the sections of *text* in document order.

        Concatenating the returned sections need not reproduce *text*
        exactly (separators such as thematic breaks may be dropped), but no
        content other than separators may be lost.
        """


# Concrete implementations: HeaderBasedChunkingStrategy, SectionBasedChunkingStrategy,
#   SemanticSimilarityChunkingStrategy, TokenBasedChunkingStrategy,
#   FallbackChunkingStrategy
# Located in: ingestkit/services/chunking/
class IChunkingStrategy(ABC):
    """Contract for splitting a document into bounded chunks."""

    @abstractmethod
    async def chunk(
        self,
        document: IngestionDocument,
        cancellation: CancellationToken | None = None,
    ) -> list[DocumentChunk]:
        """Split *document* into chunks.

        Strategies that call remote services hand *cancellation* on to them.

        Guarantees
        ----------
        - Every chunk's ``token_count`` is at most the strategy's
          ``max_tokens_per_chunk``.
        - Chunks are ordered, with indices ``0..n-1``, and carry the
          document's id.
        - An empty or whitespace-only document yields an empty list.

        Raises
        ------
        ingestkit.utils.errors.ChunkingError
            If tokenization or an embedding call fails.
        ingestkit.utils.errors.IngestionCancelledError
            If *cancellation* fires while a remote call is in progress.
        """

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Return the identifier recorded in each chunk's metadata."""
