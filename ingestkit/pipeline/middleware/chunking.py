"""Chunking stage: split each document and post-process its chunks.

Per document, in order: seal the document, ask the strategy for its
chunks, thread the list through every chunk processor, then store the
final list under ``context.chunks_by_document[document.id]``.  Each
document is fully chunked before the next one starts.
"""

from __future__ import annotations

from collections.abc import Sequence

from ingestkit.interfaces.chunking import IChunkingStrategy
from ingestkit.interfaces.processors import IChunkProcessor
from ingestkit.models.pipeline import IngestionContext
from ingestkit.pipeline.middleware.base import PipelineStage
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import PipelineError


class ChunkingMiddleware(PipelineStage):
    """Populate ``context.chunks_by_document`` using a chunking strategy."""

    def __init__(
        self,
        strategy: IChunkingStrategy,
        chunk_processors: Sequence[IChunkProcessor] = (),
    ) -> None:
        super().__init__()
        self._strategy = strategy
        self._chunk_processors = tuple(chunk_processors)

    async def run(self, context: IngestionContext, cancellation: CancellationToken) -> None:
        for document in context.documents:
            cancellation.raise_if_cancelled()
            document.seal()
            chunks = list(await self._strategy.chunk(document, cancellation))

            for processor in self._chunk_processors:
                cancellation.raise_if_cancelled()
                chunks = list(await processor.process(chunks, cancellation))
                foreign = {c.document_id for c in chunks if c.document_id != document.id}
                if foreign:
                    raise PipelineError(
                        f"{processor.get_processor_name()} returned chunks of "
                        f"{sorted(foreign)} while processing '{document.id}'"
                    )

            context.chunks_by_document[document.id] = chunks
            self._logger.debug(
                "document_chunked",
                run_id=context.run_id,
                document_id=document.id,
                strategy=self._strategy.get_strategy_name(),
                chunks=len(chunks),
            )

        self._logger.info(
            "chunking_complete",
            run_id=context.run_id,
            documents=len(context.chunks_by_document),
            chunks=context.chunk_count,
        )
