"""Custom exception hierarchy for ingestkit.

All library exceptions inherit from :class:`IngestKitError`, which carries
an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "huggingface-tokenizer", "openai-embedding") caused the
failure.

The hierarchy is organized by the failure taxonomy of the pipeline:

    IngestKitError  (base -- catch-all for any ingestkit error)
    +-- ConfigurationError        (invalid options, missing collaborators)
    +-- PipelineError             (stage contract violations)
    |   +-- DuplicateDocumentError
    |   +-- DocumentSealedError
    +-- DecodingError             (a decoder could not read an item)
    +-- ChunkingError             (a chunking strategy failed)
    |   +-- TokenizerError        (the token counter failed)
    |   +-- EmbeddingServiceError (the embedding collaborator failed)
    +-- WriterError               (the writer collaborator failed)
    +-- LLMError                  (a chat-completion call failed)
    +-- IngestionCancelledError   (the run was cancelled)

Configuration errors are raised at construction time and are never retried
or swallowed.  Everything else may surface while a stage runs and travels
up the middleware chain as a failed :class:`~ingestkit.models.pipeline.StageOutcome`.
"""


class IngestKitError(Exception):
    """Base exception for all ingestkit errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which collaborator triggered the error.
    ``__str__`` prefixes the provider name in brackets, e.g.
    ``[openai-embedding] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected ingestion error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Construction-time errors
# ---------------------------------------------------------------------------

class ConfigurationError(IngestKitError):
    """Raised when options are invalid or a required collaborator is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Stage failures
# ---------------------------------------------------------------------------

class PipelineError(IngestKitError):
    """Raised when a stage breaks a pipeline contract."""

    def __init__(
        self,
        message: str = "Pipeline stage failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DuplicateDocumentError(PipelineError):
    """Raised when two documents in one run share an identifier."""

    def __init__(self, document_id: str) -> None:
        self._document_id = document_id
        super().__init__(message=f"Duplicate document identifier '{document_id}'")

    @property
    def document_id(self) -> str:
        return self._document_id


class DocumentSealedError(PipelineError):
    """Raised when a document is modified after chunking has started."""

    def __init__(self, document_id: str, field: str) -> None:
        super().__init__(
            message=f"Document '{document_id}' is sealed; cannot assign '{field}'",
        )


class DecodingError(IngestKitError):
    """Raised when a decoder cannot turn a byte stream into a document."""

    def __init__(
        self,
        message: str = "Document decoding failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ChunkingError(IngestKitError):
    """Raised when a chunking strategy fails on a document."""

    def __init__(
        self,
        message: str = "Chunking failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TokenizerError(ChunkingError):
    """Raised when the token counter fails.

    Kept distinct from :class:`EmbeddingServiceError` so callers can tell a
    local tokenizer problem from a remote embedding outage.
    """

    def __init__(
        self,
        message: str = "Token counting failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingServiceError(ChunkingError):
    """Raised when the embedding collaborator fails during semantic chunking.

    :class:`~ingestkit.services.chunking.fallback.FallbackChunkingStrategy`
    catches this to retry the document with a simpler strategy.
    """

    def __init__(
        self,
        message: str = "Embedding service failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class WriterError(IngestKitError):
    """Raised when the writer collaborator cannot persist a document."""

    def __init__(
        self,
        message: str = "Document write failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Remote calls and cancellation
# ---------------------------------------------------------------------------

class LLMError(IngestKitError):
    """Raised when an LLM API call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IngestionCancelledError(IngestKitError):
    """Raised when a run observes its cancellation token.

    Not a data error, but it travels the same propagation path as stage
    failures and is never retried.
    """

    def __init__(self, message: str = "Ingestion run was cancelled") -> None:
        super().__init__(message=message)
