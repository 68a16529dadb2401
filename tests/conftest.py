"""Shared pytest fixtures for the ingestkit test suite."""

from __future__ import annotations

import io
import logging
from collections.abc import AsyncIterator
from pathlib import PurePosixPath
from typing import BinaryIO
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from ingestkit.interfaces.document_source import IDocumentSource, IIngestionFile
from ingestkit.interfaces.document_writer import IDocumentWriter
from ingestkit.interfaces.embedding_provider import IEmbeddingProvider
from ingestkit.interfaces.llm_provider import ILLMProvider
from ingestkit.models.ingestion import ChunkingOptions, IngestionDocument
from ingestkit.services.token_counters import WhitespaceTokenCounter
from ingestkit.utils.cancellation import CancellationToken

# ---------------------------------------------------------------------------
# In-memory source fakes
# ---------------------------------------------------------------------------


class FakeIngestionFile(IIngestionFile):
    """An in-memory raw item that remembers the streams it handed out."""

    def __init__(self, name: str, data: bytes | str) -> None:
        self._name = name
        self._data = data.encode("utf-8") if isinstance(data, str) else data
        self.streams: list[io.BytesIO] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def extension(self) -> str:
        return PurePosixPath(self._name).suffix

    async def open_read(self) -> BinaryIO:
        stream = io.BytesIO(self._data)
        self.streams.append(stream)
        return stream


class FakeDocumentSource(IDocumentSource):
    """Yields a fixed list of files and counts how often it was read."""

    def __init__(self, files: list[IIngestionFile]) -> None:
        self._files = files
        self.read_calls = 0

    async def read(self, cancellation: CancellationToken | None = None) -> AsyncIterator[IIngestionFile]:
        self.read_calls += 1
        for file in self._files:
            yield file

    def get_provider_name(self) -> str:
        return "fake-source"


class TopicEmbeddingProvider(IEmbeddingProvider):
    """Deterministic embeddings: one axis per topic keyword found in the text.

    Texts sharing a topic have cosine similarity 1.0; texts with disjoint
    topics have similarity 0.0.
    """

    def __init__(self, topics: list[str]) -> None:
        self._topics = topics
        self.calls: list[list[str]] = []

    def _vector(self, text: str) -> list[float]:
        lowered = text.lower()
        return [1.0 if topic in lowered else 0.0 for topic in self._topics]

    async def embed(self, texts: list[str], cancellation=None) -> list[list[float]]:
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    async def embed_single(self, text: str, cancellation=None) -> list[float]:
        return self._vector(text)

    def get_provider_name(self) -> str:
        return "topic-embedding"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _structlog_through_stdlib():
    """Send structlog output to stdlib logging so pytest captures it per test.

    Without this, the first logger use would bind whatever stream
    ``sys.stderr`` happens to be at that moment.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def token_counter() -> WhitespaceTokenCounter:
    """Deterministic whitespace token counter."""
    return WhitespaceTokenCounter()


@pytest.fixture
def small_options() -> ChunkingOptions:
    """A budget small enough to force splits on short test texts."""
    return ChunkingOptions(max_tokens_per_chunk=5, overlap_tokens=0)


@pytest.fixture
def cancellation() -> CancellationToken:
    return CancellationToken()


@pytest.fixture
def make_file():
    """Factory for in-memory ingestion files."""

    def _make(name: str, data: bytes | str = "") -> FakeIngestionFile:
        return FakeIngestionFile(name, data)

    return _make


@pytest.fixture
def make_source():
    """Factory for fake document sources over a list of files."""

    def _make(files: list[IIngestionFile]) -> FakeDocumentSource:
        return FakeDocumentSource(files)

    return _make


@pytest.fixture
def make_document():
    """Factory for ingestion documents with optional metadata."""

    def _make(doc_id: str, content: str = "some content", **metadata) -> IngestionDocument:
        return IngestionDocument(id=doc_id, content=content, metadata=dict(metadata))

    return _make


@pytest.fixture
def topic_embedding_provider() -> TopicEmbeddingProvider:
    """Embedding provider that separates 'cat' and 'car' texts."""
    return TopicEmbeddingProvider(["cat", "car"])


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider returning a fixed JSON payload."""
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.complete = AsyncMock(return_value='{"result": "ok"}')
    return mock


@pytest.fixture
def mock_writer() -> IDocumentWriter:
    """Mock IDocumentWriter that accepts every write."""
    mock = MagicMock(spec=IDocumentWriter)
    mock.get_provider_name.return_value = "mock-writer"
    mock.write = AsyncMock(return_value=None)
    return mock
