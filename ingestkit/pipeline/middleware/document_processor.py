"""Document-processor stage: enrich every document before chunking."""

from __future__ import annotations

from collections.abc import Sequence

from ingestkit.interfaces.processors import IDocumentProcessor
from ingestkit.models.pipeline import IngestionContext
from ingestkit.pipeline.middleware.base import PipelineStage
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import PipelineError


class DocumentProcessorMiddleware(PipelineStage):
    """Apply each processor, in order, to each document, one at a time.

    A processor may return a replacement document; it must keep the
    original identifier and takes the original's place in
    ``context.documents``.
    """

    def __init__(self, processors: Sequence[IDocumentProcessor]) -> None:
        super().__init__()
        self._processors = tuple(processors)

    async def run(self, context: IngestionContext, cancellation: CancellationToken) -> None:
        for position, document in enumerate(list(context.documents)):
            for processor in self._processors:
                cancellation.raise_if_cancelled()
                result = await processor.process(document, cancellation)
                if result is not document:
                    if result.id != document.id:
                        raise PipelineError(
                            f"{processor.get_processor_name()} changed document id "
                            f"'{document.id}' to '{result.id}'"
                        )
                    context.documents[position] = result
                    document = result

        self._logger.debug(
            "document_processing_complete",
            run_id=context.run_id,
            documents=len(context.documents),
            processors=len(self._processors),
        )
