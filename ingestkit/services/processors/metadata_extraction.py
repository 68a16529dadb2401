"""LLM-powered metadata tag extraction for whole documents.

Uses an :class:`~ingestkit.interfaces.llm_provider.ILLMProvider` to extract
entity, geographic and topic tags from a document's text.  Tags let
writers support filtered retrieval (e.g. "only chunks mentioning Berlin").

The extraction flow:
1. The document text (truncated) is sent to the LLM with an extraction prompt
2. The LLM returns JSON: ``{"entities": [...], "places": [...], "topics": [...]}``
3. The JSON is parsed (handling markdown fences and surrounding prose)
4. Non-empty tag lists are written to the document metadata as
   comma-separated strings

Extraction failures are logged but never block ingestion -- the document
keeps its metadata unchanged.  Cancellation is the exception: it always
propagates.
"""

from __future__ import annotations

import json
import re

import structlog

from ingestkit.interfaces.llm_provider import ILLMProvider
from ingestkit.interfaces.processors import IDocumentProcessor
from ingestkit.models.ingestion import IngestionDocument, MetadataKeys
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import IngestionCancelledError

logger = structlog.get_logger(logger_name=__name__)

_EXTRACTION_SYSTEM_PROMPT = "You are a metadata extraction assistant for a document index."

# Low temperature and "only include items explicitly mentioned" minimize
# hallucinated tags.
_EXTRACTION_USER_PROMPT = """\
Extract structured tags from this document.
Return JSON: {{"entities": [...], "places": [...], "topics": [...]}}
Only include items explicitly mentioned in the text. Be precise.

Text:
{text}"""

_FENCED_JSON = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)

# LLM response key -> metadata key
_TAG_KEYS = {
    "entities": MetadataKeys.ENTITY_TAGS,
    "places": MetadataKeys.GEOGRAPHIC_TAGS,
    "topics": MetadataKeys.TOPIC_TAGS,
}


class MetadataExtractionProcessor(IDocumentProcessor):
    """Tag each document with entities, places and topics found by an LLM.

    Parameters
    ----------
    llm:
        The LLM provider used for extraction prompts (injected, swappable).
    max_chars:
        Number of leading characters of the document sent to the LLM.
    """

    def __init__(self, llm: ILLMProvider, max_chars: int = 3000) -> None:
        self._llm = llm
        self._max_chars = max_chars

    async def process(
        self,
        document: IngestionDocument,
        cancellation: CancellationToken,
    ) -> IngestionDocument:
        cancellation.raise_if_cancelled()
        if not document.content.strip():
            return document

        try:
            response = await self._llm.complete(
                system_prompt=_EXTRACTION_SYSTEM_PROMPT,
                user_prompt=_EXTRACTION_USER_PROMPT.format(
                    text=document.content[: self._max_chars]
                ),
                temperature=0.1,
                max_tokens=500,
                cancellation=cancellation,
            )
        except IngestionCancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "metadata_extraction_failed",
                document_id=document.id,
                provider=self._llm.get_provider_name(),
                error=str(exc),
            )
            return document

        tags = self._parse_response(response)
        for key, values in tags.items():
            if values:
                document.set_metadata(key, ", ".join(values))

        logger.debug(
            "metadata_extraction_complete",
            document_id=document.id,
            tagged=sum(1 for values in tags.values() if values),
        )
        return document

    @staticmethod
    def _parse_response(response: str) -> dict[str, list[str]]:
        """Parse the LLM JSON response into metadata key -> tag list.

        Handles clean JSON, markdown-fenced JSON and JSON embedded in prose.
        Returns empty tag lists on parse failure (never raises).
        """
        empty: dict[str, list[str]] = {key: [] for key in _TAG_KEYS.values()}

        cleaned = response.strip()
        fence_match = _FENCED_JSON.search(cleaned)
        if fence_match:
            cleaned = fence_match.group(1).strip()
        else:
            brace_start = cleaned.find("{")
            brace_end = cleaned.rfind("}")
            if brace_start != -1 and brace_end > brace_start:
                cleaned = cleaned[brace_start : brace_end + 1]

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError:
            logger.warning("json_parse_failed", response_preview=response[:200])
            return empty

        if not isinstance(data, dict):
            return empty

        def _as_str_list(val: object) -> list[str]:
            if isinstance(val, list):
                return [str(v).strip() for v in val if v and str(v).strip()]
            return []

        return {
            metadata_key: _as_str_list(data.get(response_key))
            for response_key, metadata_key in _TAG_KEYS.items()
        }
