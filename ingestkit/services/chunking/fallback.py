"""Run a primary strategy, falling back when its embedding service fails."""

from __future__ import annotations

import structlog

from ingestkit.interfaces.chunking import IChunkingStrategy
from ingestkit.models.ingestion import DocumentChunk, IngestionDocument
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import ConfigurationError, EmbeddingServiceError

logger = structlog.get_logger(logger_name=__name__)


class FallbackChunkingStrategy(IChunkingStrategy):
    """Delegate to *primary*; on :class:`EmbeddingServiceError` use *fallback*.

    Tokenizer failures are not caught: the fallback would hit the same
    token counter.  Cancellation is not an embedding failure and always
    propagates.
    """

    def __init__(self, primary: IChunkingStrategy, fallback: IChunkingStrategy) -> None:
        if primary is None or fallback is None:
            raise ConfigurationError("Both primary and fallback strategies are required")
        self._primary = primary
        self._fallback = fallback

    def get_strategy_name(self) -> str:
        return (
            f"{self._primary.get_strategy_name()}"
            f"|{self._fallback.get_strategy_name()}"
        )

    async def chunk(
        self,
        document: IngestionDocument,
        cancellation: CancellationToken | None = None,
    ) -> list[DocumentChunk]:
        try:
            return await self._primary.chunk(document, cancellation)
        except EmbeddingServiceError as exc:
            logger.warning(
                "chunking_fallback",
                document_id=document.id,
                primary=self._primary.get_strategy_name(),
                fallback=self._fallback.get_strategy_name(),
                error=str(exc),
            )
            return await self._fallback.chunk(document, cancellation)
