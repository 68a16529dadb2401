"""Semantic-similarity chunking: group adjacent paragraphs by meaning.

The algorithm works in three phases:

1. Split the document into paragraphs.  A paragraph over budget is split
   into sentences, and a sentence still over budget is force-split.
2. Embed every unit with a single batched call to the injected
   :class:`~ingestkit.interfaces.embedding_provider.IEmbeddingProvider`.
3. Walk the units in order, computing the cosine similarity of each unit
   with its predecessor.  A similarity below the threshold starts a new
   chunk, and so does a unit that would push the current chunk over the
   token budget.

Units are tracked as character offsets into the document, and a chunk is
the slice from its first unit's start to its last unit's end, so the
original spacing between grouped units is kept.

Embedding failures surface as :class:`~ingestkit.utils.errors.EmbeddingServiceError`
and token-counter failures as :class:`~ingestkit.utils.errors.TokenizerError`,
so callers can tell them apart and fall back to a simpler strategy.
Cancellation is re-raised as is.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import structlog

from ingestkit.interfaces.chunking import ITokenCounter
from ingestkit.interfaces.embedding_provider import IEmbeddingProvider
from ingestkit.models.ingestion import ChunkingOptions
from ingestkit.services.chunking.base import BaseChunkingStrategy, ChunkPiece
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import (
    ConfigurationError,
    EmbeddingServiceError,
    IngestionCancelledError,
)
from ingestkit.utils.text import paragraph_spans, sentence_spans, strip_span

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.75


@dataclass
class _Unit:
    start: int
    end: int
    token_count: int


class SemanticSimilarityChunkingStrategy(BaseChunkingStrategy):
    """Merge consecutive related paragraphs into chunks within budget.

    Parameters
    ----------
    options:
        Validated token budget.
    token_counter:
        Counting oracle shared with the other strategies.
    embedding_provider:
        Required.  Called once per document that exceeds the budget.
    similarity_threshold:
        Cosine similarity in ``[-1.0, 1.0]`` below which adjacent units are
        placed in separate chunks.
    """

    name = "semantic-similarity"

    def __init__(
        self,
        options: ChunkingOptions,
        token_counter: ITokenCounter,
        embedding_provider: IEmbeddingProvider | None,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        super().__init__(options, token_counter)
        if embedding_provider is None:
            raise ConfigurationError(
                "Semantic similarity chunking requires an embedding provider"
            )
        if not -1.0 <= similarity_threshold <= 1.0:
            raise ConfigurationError(
                f"similarity_threshold must be within [-1.0, 1.0], got {similarity_threshold}"
            )
        self._embedding_provider = embedding_provider
        self._similarity_threshold = similarity_threshold

    @property
    def similarity_threshold(self) -> float:
        return self._similarity_threshold

    async def _split(
        self, text: str, cancellation: CancellationToken | None
    ) -> list[ChunkPiece]:
        units = self._units(text)
        if len(units) <= 1:
            return [ChunkPiece(text[u.start : u.end], u.token_count) for u in units]

        similarities = await self._adjacent_similarities(
            [text[u.start : u.end] for u in units], cancellation
        )
        budget = self._options.max_tokens_per_chunk

        pieces: list[ChunkPiece] = []
        first = units[0]
        group_start, group_end, group_tokens = first.start, first.end, first.token_count

        for unit, similarity in zip(units[1:], similarities):
            candidate_tokens = self._count(text[group_start : unit.end])
            if similarity < self._similarity_threshold or candidate_tokens > budget:
                pieces.append(ChunkPiece(text[group_start:group_end], group_tokens))
                group_start, group_end, group_tokens = unit.start, unit.end, unit.token_count
            else:
                group_end = unit.end
                group_tokens = candidate_tokens

        pieces.append(ChunkPiece(text[group_start:group_end], group_tokens))
        logger.debug(
            "semantic_grouping_complete",
            units=len(units),
            chunks=len(pieces),
            threshold=self._similarity_threshold,
        )
        return pieces

    # ------------------------------------------------------------------
    # Unit extraction
    # ------------------------------------------------------------------

    def _units(self, text: str) -> list[_Unit]:
        budget = self._options.max_tokens_per_chunk
        units: list[_Unit] = []
        for p_start, p_end in paragraph_spans(text):
            count = self._count(text[p_start:p_end])
            if count <= budget:
                units.append(_Unit(p_start, p_end, count))
                continue
            paragraph = text[p_start:p_end]
            for s_start, s_end in sentence_spans(paragraph):
                units.extend(self._sentence_units(paragraph[s_start:s_end], p_start + s_start))
        return units

    def _sentence_units(self, sentence: str, offset: int) -> list[_Unit]:
        count = self._count(sentence)
        if count <= self._options.max_tokens_per_chunk:
            return [_Unit(offset, offset + len(sentence), count)]
        units: list[_Unit] = []
        for start, end in self._split_spans(sentence):
            start, end = strip_span(sentence, start, end)
            if start < end:
                units.append(
                    _Unit(offset + start, offset + end, self._count(sentence[start:end]))
                )
        return units

    # ------------------------------------------------------------------
    # Similarity
    # ------------------------------------------------------------------

    async def _adjacent_similarities(
        self, texts: list[str], cancellation: CancellationToken | None
    ) -> list[float]:
        provider_name = self._embedding_provider.get_provider_name()
        try:
            vectors = await self._embedding_provider.embed(texts, cancellation=cancellation)
        except (EmbeddingServiceError, IngestionCancelledError):
            raise
        except Exception as exc:
            raise EmbeddingServiceError(
                message=f"Embedding request failed: {exc}",
                provider_name=provider_name,
            ) from exc

        if len(vectors) != len(texts):
            raise EmbeddingServiceError(
                message=f"Expected {len(texts)} embeddings, received {len(vectors)}",
                provider_name=provider_name,
            )

        try:
            matrix = np.asarray(vectors, dtype=np.float64)
        except ValueError as exc:
            raise EmbeddingServiceError(
                message=f"Embeddings have inconsistent dimensions: {exc}",
                provider_name=provider_name,
            ) from exc
        if matrix.ndim != 2 or matrix.shape[1] == 0:
            raise EmbeddingServiceError(
                message=f"Unexpected embedding shape {matrix.shape}",
                provider_name=provider_name,
            )

        norms = np.linalg.norm(matrix, axis=1)
        norms[norms == 0.0] = 1.0
        unit_vectors = matrix / norms[:, np.newaxis]
        similarities = np.sum(unit_vectors[:-1] * unit_vectors[1:], axis=1)
        return [float(value) for value in similarities]
