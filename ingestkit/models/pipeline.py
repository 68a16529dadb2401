"""Run-scoped state for the ingestion pipeline.

:class:`IngestionContext` is the single mutable aggregate threaded through
the middleware chain.  It is created by the caller for exactly one run,
owned exclusively by that run and discarded afterwards; concurrent runs
each get their own context, so no locking is needed.

:class:`StageOutcome` is the explicit result each stage returns instead of
relying on exceptions for control flow.  A failed outcome travels back up
the chain until an error-handling stage turns it into an
:class:`IngestionErrorRecord` or the pipeline re-raises it to its caller.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ingestkit.models.ingestion import DocumentChunk, IngestionDocument, MetadataValue
from ingestkit.utils.errors import DuplicateDocumentError


# ---------------------------------------------------------------------------
# StageOutcome -- what every middleware invocation returns.
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StageOutcome:
    """Success, or a failure carrying the original exception unchanged."""

    error: Exception | None = None
    stage: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls) -> StageOutcome:
        return _SUCCESS

    @classmethod
    def failure(cls, error: Exception, stage: str | None = None) -> StageOutcome:
        return cls(error=error, stage=stage)


_SUCCESS = StageOutcome()


# ---------------------------------------------------------------------------
# IngestionErrorRecord -- a failure recorded without aborting the run.
# ---------------------------------------------------------------------------
class IngestionErrorRecord(BaseModel):
    """A failure captured by the error-handling stage.

    ``str(record)`` is the human-readable description shown to users.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    stage: str | None = None
    error_type: str = "Exception"
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @classmethod
    def from_exception(cls, error: Exception, stage: str | None = None) -> IngestionErrorRecord:
        return cls(
            message=str(error) or type(error).__name__,
            stage=stage,
            error_type=type(error).__name__,
        )

    def __str__(self) -> str:
        if self.stage:
            return f"{self.stage}: {self.message}"
        return self.message


# ---------------------------------------------------------------------------
# IngestionRunSummary -- a frozen snapshot for reporting.
# ---------------------------------------------------------------------------
class IngestionRunSummary(BaseModel):
    """Counts describing a finished (or in-flight) run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    documents: int = Field(ge=0)
    chunked_documents: int = Field(ge=0)
    chunks: int = Field(ge=0)
    errors: int = Field(ge=0)
    duration_seconds: float = Field(ge=0.0)

    @property
    def succeeded(self) -> bool:
        return self.errors == 0


# ---------------------------------------------------------------------------
# IngestionContext -- the run-scoped aggregate.
# ---------------------------------------------------------------------------
class IngestionContext(BaseModel):
    """Mutable state of a single pipeline run.

    ``documents`` keeps discovery order; ``chunks_by_document`` maps a
    document identifier to its ordered chunk list; ``errors`` is
    append-only; ``properties`` is an open bag for stage-to-stage values
    that have no typed field.
    """

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    documents: list[IngestionDocument] = Field(default_factory=list)
    chunks_by_document: dict[str, list[DocumentChunk]] = Field(default_factory=dict)
    errors: list[IngestionErrorRecord] = Field(default_factory=list)
    properties: dict[str, MetadataValue] = Field(default_factory=dict)

    _started_monotonic: float = PrivateAttr(default_factory=time.monotonic)

    def add_document(self, document: IngestionDocument) -> None:
        """Append *document*, rejecting a duplicate identifier."""
        if any(existing.id == document.id for existing in self.documents):
            raise DuplicateDocumentError(document.id)
        self.documents.append(document)

    def get_document(self, document_id: str) -> IngestionDocument | None:
        for document in self.documents:
            if document.id == document_id:
                return document
        return None

    def record_error(self, error: Exception, stage: str | None = None) -> IngestionErrorRecord:
        record = IngestionErrorRecord.from_exception(error, stage=stage)
        self.errors.append(record)
        return record

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def chunk_count(self) -> int:
        return sum(len(chunks) for chunks in self.chunks_by_document.values())

    def summary(self) -> IngestionRunSummary:
        return IngestionRunSummary(
            run_id=self.run_id,
            documents=len(self.documents),
            chunked_documents=len(self.chunks_by_document),
            chunks=self.chunk_count,
            errors=len(self.errors),
            duration_seconds=max(0.0, time.monotonic() - self._started_monotonic),
        )
