"""Writer stage: hand each document and its chunks to the writer."""

from __future__ import annotations

from ingestkit.interfaces.document_writer import IDocumentWriter
from ingestkit.models.pipeline import IngestionContext
from ingestkit.pipeline.middleware.base import PipelineStage
from ingestkit.utils.cancellation import CancellationToken


class WriterMiddleware(PipelineStage):
    """Persist every document through an injected :class:`IDocumentWriter`.

    A document that never reached chunking is written with an empty chunk
    list.  Writer exceptions are not wrapped.
    """

    def __init__(self, writer: IDocumentWriter) -> None:
        super().__init__()
        self._writer = writer

    async def run(self, context: IngestionContext, cancellation: CancellationToken) -> None:
        for document in context.documents:
            cancellation.raise_if_cancelled()
            chunks = context.chunks_by_document.get(document.id, [])
            await self._writer.write(document, chunks, cancellation)

        self._logger.info(
            "writer_complete",
            run_id=context.run_id,
            writer=self._writer.get_provider_name(),
            documents=len(context.documents),
        )
