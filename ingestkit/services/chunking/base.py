"""Shared size and overlap policy for every chunking strategy.

:class:`BaseChunkingStrategy` implements the rules all variants share:

1. **Blank documents** yield no chunks.
2. **Small documents** (token count within budget) yield exactly one chunk
   whose content is the full, untouched document content.
3. **Forced splits** -- a unit larger than the budget is cut at the longest
   prefix whose token count fits, found by binary search over prefix
   counts from the injected :class:`~ingestkit.interfaces.chunking.ITokenCounter`.
   With ``overlap_tokens > 0`` the next piece starts at the earliest
   position whose suffix of the previous piece counts at most
   ``overlap_tokens`` tokens, so consecutive pieces share that tail.

Subclasses only decide how a too-large document is cut into units by
implementing :meth:`BaseChunkingStrategy._split`.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field

import structlog

from ingestkit.interfaces.chunking import IChunkingStrategy, ITokenCounter
from ingestkit.models.ingestion import (
    ChunkingOptions,
    DocumentChunk,
    IngestionDocument,
    MetadataKeys,
    MetadataValue,
)
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import ChunkingError, ConfigurationError, TokenizerError

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class ChunkPiece:
    """Text of a future chunk with its token count and extra metadata."""

    text: str
    token_count: int
    metadata: dict[str, MetadataValue] = field(default_factory=dict)


class BaseChunkingStrategy(IChunkingStrategy):
    """Template for strategies that cut documents into bounded pieces.

    Parameters
    ----------
    options:
        Validated token budget (max tokens per chunk, overlap).
    token_counter:
        Deterministic counting oracle.  Any exception it raises is re-raised
        as :class:`~ingestkit.utils.errors.TokenizerError`.
    """

    name = "base"

    def __init__(self, options: ChunkingOptions, token_counter: ITokenCounter) -> None:
        if options is None:
            raise ConfigurationError("Chunking options are required")
        if token_counter is None:
            raise ConfigurationError("A token counter is required for chunking")
        self._options = options
        self._token_counter = token_counter

    @property
    def options(self) -> ChunkingOptions:
        return self._options

    def get_strategy_name(self) -> str:
        return self.name

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def chunk(
        self,
        document: IngestionDocument,
        cancellation: CancellationToken | None = None,
    ) -> list[DocumentChunk]:
        content = document.content
        if not content or not content.strip():
            return []

        total = self._count(content)
        if total <= self._options.max_tokens_per_chunk:
            pieces = [self._whole_document_piece(content, total)]
        else:
            pieces = await self._split(content, cancellation)

        chunks = self._build_chunks(document, pieces)
        logger.debug(
            "chunking_complete",
            document_id=document.id,
            strategy=self.name,
            total_tokens=total,
            num_chunks=len(chunks),
        )
        return chunks

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _split(
        self, text: str, cancellation: CancellationToken | None
    ) -> list[ChunkPiece]:
        """Cut *text*, known to exceed the budget, into fitting pieces."""

    def _whole_document_piece(self, content: str, token_count: int) -> ChunkPiece:
        return ChunkPiece(content, token_count)

    # ------------------------------------------------------------------
    # Token counting
    # ------------------------------------------------------------------

    def _count(self, text: str) -> int:
        try:
            return self._token_counter.count(text)
        except TokenizerError:
            raise
        except Exception as exc:
            raise TokenizerError(
                message=f"Token counting failed: {exc}",
                provider_name=self._token_counter.get_counter_name(),
            ) from exc

    # ------------------------------------------------------------------
    # Unit fitting and forced splits
    # ------------------------------------------------------------------

    def _fit_units(self, units: list[str]) -> list[ChunkPiece]:
        """Turn each unit into one piece, force-splitting oversized units."""
        pieces: list[ChunkPiece] = []
        for unit in units:
            text = unit.strip()
            if not text:
                continue
            count = self._count(text)
            if count <= self._options.max_tokens_per_chunk:
                pieces.append(ChunkPiece(text, count))
            else:
                pieces.extend(self._hard_split(text))
        return pieces

    def _hard_split(self, text: str) -> list[ChunkPiece]:
        pieces: list[ChunkPiece] = []
        for start, end in self._split_spans(text):
            piece = text[start:end].strip()
            if piece:
                pieces.append(ChunkPiece(piece, self._count(piece)))
        return pieces

    def _split_spans(self, text: str) -> list[tuple[int, int]]:
        """Return ``(start, end)`` character spans covering *text*.

        Each span counts at most ``max_tokens_per_chunk`` tokens; spans
        overlap by at most ``overlap_tokens`` tokens.
        """
        budget = self._options.max_tokens_per_chunk
        overlap = self._options.overlap_tokens
        spans: list[tuple[int, int]] = []
        start = 0
        length = len(text)

        while start < length:
            if self._count(text[start:]) <= budget:
                spans.append((start, length))
                break

            end = self._longest_fitting_prefix(text, start, budget)
            if end <= start:
                raise ChunkingError(
                    f"Cannot split text at offset {start}: a single character "
                    f"exceeds the budget of {budget} tokens"
                )
            spans.append((start, end))

            next_start = end
            if overlap > 0:
                next_start = self._overlap_start(text, start, end, overlap)
                if next_start <= start:
                    next_start = end
            start = next_start

        return spans

    def _longest_fitting_prefix(self, text: str, start: int, budget: int) -> int:
        # count(text[start:lo]) <= budget < count(text[start:hi])
        lo, hi = start, len(text)
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if self._count(text[start:mid]) <= budget:
                lo = mid
            else:
                hi = mid
        return lo

    def _overlap_start(self, text: str, start: int, end: int, overlap: int) -> int:
        if self._count(text[start:end]) <= overlap:
            return start
        # count(text[lo:end]) > overlap >= count(text[hi:end])
        lo, hi = start, end
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if self._count(text[mid:end]) <= overlap:
                hi = mid
            else:
                lo = mid
        return hi

    # ------------------------------------------------------------------
    # Chunk construction
    # ------------------------------------------------------------------

    def _build_chunks(
        self, document: IngestionDocument, pieces: list[ChunkPiece]
    ) -> list[DocumentChunk]:
        budget = self._options.max_tokens_per_chunk
        chunks: list[DocumentChunk] = []
        for index, piece in enumerate(pieces):
            if piece.token_count > budget:
                raise ChunkingError(
                    f"Chunk {index} of '{document.id}' has {piece.token_count} tokens, "
                    f"exceeding the budget of {budget}",
                )
            metadata: dict[str, MetadataValue] = dict(document.metadata)
            metadata.update(piece.metadata)
            metadata[MetadataKeys.CHUNK_INDEX] = index
            metadata[MetadataKeys.TOKEN_COUNT] = piece.token_count
            metadata[MetadataKeys.CHUNKING_STRATEGY] = self.name
            chunks.append(
                DocumentChunk.create(
                    document_id=document.id,
                    index=index,
                    content=piece.text,
                    token_count=piece.token_count,
                    metadata=metadata,
                )
            )
        return chunks
