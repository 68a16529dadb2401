"""Chunk processor that attaches an LLM-written summary to every chunk."""

from __future__ import annotations

import structlog

from ingestkit.interfaces.llm_provider import ILLMProvider
from ingestkit.interfaces.processors import IChunkProcessor
from ingestkit.models.ingestion import DocumentChunk, MetadataKeys
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import ConfigurationError, LLMError

logger = structlog.get_logger(logger_name=__name__)

_SUMMARY_SYSTEM_PROMPT = (
    "You write short, factual summaries of document excerpts. "
    "Reply with the summary only."
)

_SUMMARY_USER_PROMPT = """\
Summarize the following text in at most {max_words} words.

Text:
{text}"""


class SummaryChunkProcessor(IChunkProcessor):
    """Store a summary of each chunk under the ``summary`` metadata key.

    Chunks are frozen, so each one is replaced by a copy with the extra
    metadata entry; order and count are preserved.  LLM failures are not
    swallowed: they fail the chunking stage.
    """

    def __init__(self, llm: ILLMProvider, max_word_count: int = 100) -> None:
        if max_word_count <= 0:
            raise ConfigurationError(f"max_word_count must be positive, got {max_word_count}")
        self._llm = llm
        self._max_word_count = max_word_count

    async def process(
        self,
        chunks: list[DocumentChunk],
        cancellation: CancellationToken,
    ) -> list[DocumentChunk]:
        summarized: list[DocumentChunk] = []
        for chunk in chunks:
            cancellation.raise_if_cancelled()
            summary = await self._summarize(chunk, cancellation)
            metadata = dict(chunk.metadata)
            metadata[MetadataKeys.SUMMARY] = summary
            summarized.append(chunk.model_copy(update={"metadata": metadata}))

        logger.debug("chunk_summaries_complete", chunks=len(summarized))
        return summarized

    async def _summarize(self, chunk: DocumentChunk, cancellation: CancellationToken) -> str:
        response = await self._llm.complete(
            system_prompt=_SUMMARY_SYSTEM_PROMPT,
            user_prompt=_SUMMARY_USER_PROMPT.format(
                max_words=self._max_word_count, text=chunk.content
            ),
            temperature=0.2,
            max_tokens=self._max_word_count * 4,
            cancellation=cancellation,
        )
        words = response.split()
        if not words:
            raise LLMError(
                message=f"Empty summary returned for chunk {chunk.index} of '{chunk.document_id}'",
                provider_name=self._llm.get_provider_name(),
            )
        return " ".join(words[: self._max_word_count])
