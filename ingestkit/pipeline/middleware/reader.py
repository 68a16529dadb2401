"""Reader stage: turns raw source items into documents.

Iterates the injected :class:`~ingestkit.interfaces.document_source.IDocumentSource`
exactly once.  For each item the decoder registered for its lowercase
extension builds an :class:`~ingestkit.models.ingestion.IngestionDocument`,
the processors registered for that extension enrich it in order, and the
result is appended to ``context.documents``.  Items with no registered
decoder are skipped and logged; skipping is not an error.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ingestkit.interfaces.document_decoder import IDocumentDecoder
from ingestkit.interfaces.document_source import IDocumentSource
from ingestkit.interfaces.processors import IDocumentProcessor
from ingestkit.models.pipeline import IngestionContext
from ingestkit.pipeline.middleware.base import PipelineStage
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import ConfigurationError


def _normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension


class ReaderMiddleware(PipelineStage):
    """Populate ``context.documents`` from a document source."""

    def __init__(
        self,
        source: IDocumentSource,
        decoders: Mapping[str, IDocumentDecoder],
        processors_per_extension: Mapping[str, Sequence[IDocumentProcessor]] | None = None,
    ) -> None:
        super().__init__()
        if not decoders:
            raise ConfigurationError("ReaderMiddleware requires at least one decoder")
        self._source = source
        self._decoders = {_normalize_extension(ext): dec for ext, dec in decoders.items()}
        self._processors = {
            _normalize_extension(ext): tuple(procs)
            for ext, procs in (processors_per_extension or {}).items()
        }

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return tuple(sorted(self._decoders))

    async def run(self, context: IngestionContext, cancellation: CancellationToken) -> None:
        read = 0
        skipped = 0
        async for file in self._source.read(cancellation):
            cancellation.raise_if_cancelled()
            extension = _normalize_extension(file.extension)
            decoder = self._decoders.get(extension)
            if decoder is None:
                skipped += 1
                self._logger.info(
                    "reader_skipped_file",
                    run_id=context.run_id,
                    file=file.name,
                    extension=extension,
                )
                continue

            stream = await file.open_read()
            try:
                document = await decoder.decode(stream, file, cancellation)
            finally:
                stream.close()

            for processor in self._processors.get(extension, ()):
                cancellation.raise_if_cancelled()
                document = await processor.process(document, cancellation)

            context.add_document(document)
            read += 1

        self._logger.info(
            "reader_complete",
            run_id=context.run_id,
            source=self._source.get_provider_name(),
            documents=read,
            skipped=skipped,
        )
