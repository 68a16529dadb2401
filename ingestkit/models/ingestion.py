"""Document, chunk and option models for the ingestion pipeline.

Defines Pydantic v2 models for the records that flow through the
middleware chain:

- :class:`IngestionDocument` -- created by the reader stage, enriched in
  place by document processors, sealed once chunking starts.
- :class:`DocumentChunk` -- frozen slice of a document produced by a
  chunking strategy; its position in the document's chunk list is
  meaningful and preserved end-to-end.
- :class:`ChunkingOptions` and :class:`RetryPolicy` -- frozen value objects
  validated at construction; invalid combinations raise
  :class:`~ingestkit.utils.errors.ConfigurationError` before any document is
  touched.

Metadata bags hold a small closed union of scalar types
(:data:`MetadataValue`) rather than arbitrary objects, so every value can
be serialized by any writer.
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)

from ingestkit.utils.errors import ConfigurationError, DocumentSealedError

# bool must come first: Python's bool is an int subclass.
MetadataValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr, datetime]


class MetadataKeys:
    """Well-known metadata keys.  Callers may add their own keys freely."""

    SOURCE_PATH = "source-path"
    FILE_NAME = "file-name"
    EXTENSION = "extension"
    TITLE = "title"
    CHUNK_INDEX = "chunk-index"
    TOKEN_COUNT = "token-count"
    CHUNKING_STRATEGY = "chunking-strategy"
    START_TOKEN = "start-token"
    END_TOKEN = "end-token"
    SUMMARY = "summary"
    ENTITY_TAGS = "entity-tags"
    GEOGRAPHIC_TAGS = "geographic-tags"
    TOPIC_TAGS = "topic-tags"


# ---------------------------------------------------------------------------
# IngestionDocument -- the unit the reader produces.
# ---------------------------------------------------------------------------
class IngestionDocument(BaseModel):
    """A document read from the source, identified uniquely within a run.

    Document processors may reassign ``content`` and update ``metadata``
    until :meth:`seal` is called by the chunking stage.  After that, any
    attribute assignment or :meth:`set_metadata` call raises
    :class:`~ingestkit.utils.errors.DocumentSealedError`.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(min_length=1, description="Identifier, unique within one run.")
    content: str = Field(default="", description="Full text of the document.")
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    _sealed: bool = PrivateAttr(default=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and getattr(self, "_sealed", False):
            raise DocumentSealedError(self.id, name)
        super().__setattr__(name, value)

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Freeze the document; called when chunking begins."""
        self._sealed = True

    def set_metadata(self, key: str, value: MetadataValue) -> None:
        """Set a single metadata entry, honouring the seal."""
        if self._sealed:
            raise DocumentSealedError(self.id, f"metadata[{key!r}]")
        self.metadata[key] = value


# ---------------------------------------------------------------------------
# DocumentChunk -- the unit strategies produce and writers persist.
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A contiguous slice of one document's content.

    Chunks refer to their document by identifier only.  ``chunk_id`` is a
    content hash so re-chunking an unchanged document yields identical
    chunks.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Deterministic identifier for this chunk.")
    document_id: str = Field(min_length=1, description="Identifier of the parent document.")
    index: int = Field(ge=0, description="Position within the document's chunk sequence.")
    content: str
    token_count: int = Field(default=0, ge=0)
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        document_id: str,
        index: int,
        content: str,
        token_count: int = 0,
        metadata: dict[str, MetadataValue] | None = None,
    ) -> DocumentChunk:
        """Build a chunk, deriving ``chunk_id`` from its identity and content."""
        digest = hashlib.sha256(
            f"{document_id}\x00{index}\x00{content}".encode()
        ).hexdigest()
        return cls(
            chunk_id=digest[:32],
            document_id=document_id,
            index=index,
            content=content,
            token_count=token_count,
            metadata=dict(metadata or {}),
        )


# ---------------------------------------------------------------------------
# Option value objects
# ---------------------------------------------------------------------------
class ChunkingOptions(BaseModel):
    """Token budget shared by every chunking strategy.

    ``overlap_tokens`` must be strictly smaller than
    ``max_tokens_per_chunk``; otherwise a forced split could never make
    progress.
    """

    model_config = ConfigDict(frozen=True)

    max_tokens_per_chunk: int = 2000
    overlap_tokens: int = 0

    @model_validator(mode="after")
    def _validate_budget(self) -> ChunkingOptions:
        if self.max_tokens_per_chunk <= 0:
            raise ConfigurationError(
                f"max_tokens_per_chunk must be positive, got {self.max_tokens_per_chunk}"
            )
        if self.overlap_tokens < 0:
            raise ConfigurationError(
                f"overlap_tokens must be non-negative, got {self.overlap_tokens}"
            )
        if self.overlap_tokens >= self.max_tokens_per_chunk:
            raise ConfigurationError(
                f"overlap_tokens ({self.overlap_tokens}) must be smaller than "
                f"max_tokens_per_chunk ({self.max_tokens_per_chunk})"
            )
        return self


class RetryPolicy(BaseModel):
    """Bounded exponential backoff settings.

    Delays are in seconds.  The policy is attached to a wrapped provider at
    construction time and shared read-only by every call made through it.
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 60.0
    backoff_multiplier: float = 2.0

    @model_validator(mode="after")
    def _validate_policy(self) -> RetryPolicy:
        if self.max_retries < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay < 0:
            raise ConfigurationError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay < self.initial_delay:
            raise ConfigurationError(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})"
            )
        if self.backoff_multiplier <= 1.0:
            raise ConfigurationError(
                f"backoff_multiplier must be > 1.0, got {self.backoff_multiplier}"
            )
        return self

    def delays(self) -> list[float]:
        """Return the sleep durations before each retry, in order."""
        schedule: list[float] = []
        delay = self.initial_delay
        for _ in range(self.max_retries):
            schedule.append(delay)
            delay = min(delay * self.backoff_multiplier, self.max_delay)
        return schedule
