"""Unit tests for the built-in middleware stages."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from ingestkit.interfaces.chunking import IChunkingStrategy
from ingestkit.interfaces.processors import IChunkProcessor, IDocumentProcessor
from ingestkit.models.ingestion import DocumentChunk, IngestionDocument
from ingestkit.models.pipeline import IngestionContext, StageOutcome
from ingestkit.pipeline.middleware import (
    ChunkingMiddleware,
    DocumentProcessorMiddleware,
    ErrorHandlingMiddleware,
    ReaderMiddleware,
    WriterMiddleware,
)
from ingestkit.services.decoders.text import MarkdownDecoder, PlainTextDecoder
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import (
    ConfigurationError,
    DecodingError,
    DuplicateDocumentError,
    IngestionCancelledError,
    PipelineError,
    WriterError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _next_mock() -> AsyncMock:
    return AsyncMock(return_value=StageOutcome.success())


class _AppendProcessor(IDocumentProcessor):
    """Appends a marker to the content and records call order."""

    def __init__(self, marker: str, calls: list[str]) -> None:
        self._marker = marker
        self._calls = calls

    async def process(self, document, cancellation):
        self._calls.append(f"{self._marker}:{document.id}")
        document.content += self._marker
        return document


def _strategy_returning(per_document: dict[str, list[str]]) -> IChunkingStrategy:
    strategy = MagicMock(spec=IChunkingStrategy)
    strategy.get_strategy_name.return_value = "fake"

    async def chunk(document: IngestionDocument, cancellation=None) -> list[DocumentChunk]:
        texts = per_document.get(document.id, [])
        return [DocumentChunk.create(document.id, i, t) for i, t in enumerate(texts)]

    strategy.chunk = AsyncMock(side_effect=chunk)
    return strategy


# ---------------------------------------------------------------------------
# ReaderMiddleware
# ---------------------------------------------------------------------------


class TestReaderMiddleware:
    @pytest.mark.asyncio
    async def test_reads_known_extensions_and_skips_unknown(self, make_file, make_source) -> None:
        files = [
            make_file("a.txt", "alpha"),
            make_file("b.png", b"\x89PNG"),
            make_file("c.md", "# Gamma\nbody"),
        ]
        source = make_source(files)
        reader = ReaderMiddleware(source, {".txt": PlainTextDecoder(), ".md": MarkdownDecoder()})
        context = IngestionContext()
        next_delegate = _next_mock()

        outcome = await reader.invoke(context, next_delegate, CancellationToken())

        assert outcome.succeeded
        assert [d.id for d in context.documents] == ["a.txt", "c.md"]
        assert context.errors == []
        assert source.read_calls == 1
        next_delegate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_extension_lookup_is_case_insensitive(self, make_file, make_source) -> None:
        source = make_source([make_file("NOTES.TXT", "loud")])
        reader = ReaderMiddleware(source, {"TXT": PlainTextDecoder()})
        context = IngestionContext()

        await reader.invoke(context, _next_mock(), CancellationToken())

        assert [d.content for d in context.documents] == ["loud"]

    @pytest.mark.asyncio
    async def test_streams_are_closed_after_decoding(self, make_file, make_source) -> None:
        file = make_file("a.txt", "alpha")
        reader = ReaderMiddleware(make_source([file]), {".txt": PlainTextDecoder()})

        await reader.invoke(IngestionContext(), _next_mock(), CancellationToken())

        assert len(file.streams) == 1
        assert file.streams[0].closed

    @pytest.mark.asyncio
    async def test_per_extension_processors_run_in_order(self, make_file, make_source) -> None:
        calls: list[str] = []
        reader = ReaderMiddleware(
            make_source([make_file("a.txt", "x"), make_file("b.md", "y")]),
            {".txt": PlainTextDecoder(), ".md": MarkdownDecoder()},
            {".txt": [_AppendProcessor("1", calls), _AppendProcessor("2", calls)]},
        )
        context = IngestionContext()

        await reader.invoke(context, _next_mock(), CancellationToken())

        assert calls == ["1:a.txt", "2:a.txt"]
        assert context.documents[0].content == "x12"
        assert context.documents[1].content == "y"

    @pytest.mark.asyncio
    async def test_decoder_failure_returns_failure_without_calling_next(
        self, make_file, make_source
    ) -> None:
        reader = ReaderMiddleware(
            make_source([make_file("bad.txt", b"\xff\xfe\xfa")]), {".txt": PlainTextDecoder()}
        )
        next_delegate = _next_mock()

        outcome = await reader.invoke(IngestionContext(), next_delegate, CancellationToken())

        assert not outcome.succeeded
        assert isinstance(outcome.error, DecodingError)
        assert outcome.stage == "ReaderMiddleware"
        next_delegate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_document_ids_fail_the_stage(self, make_file, make_source) -> None:
        reader = ReaderMiddleware(
            make_source([make_file("a.txt", "1"), make_file("a.txt", "2")]),
            {".txt": PlainTextDecoder()},
        )

        outcome = await reader.invoke(IngestionContext(), _next_mock(), CancellationToken())

        assert isinstance(outcome.error, DuplicateDocumentError)

    @pytest.mark.asyncio
    async def test_cancelled_token_stops_reading(self, make_file, make_source) -> None:
        token = CancellationToken()
        token.cancel()
        reader = ReaderMiddleware(make_source([make_file("a.txt", "x")]), {".txt": PlainTextDecoder()})
        context = IngestionContext()

        outcome = await reader.invoke(context, _next_mock(), token)

        assert isinstance(outcome.error, IngestionCancelledError)
        assert context.documents == []

    def test_requires_at_least_one_decoder(self, make_source) -> None:
        with pytest.raises(ConfigurationError):
            ReaderMiddleware(make_source([]), {})


# ---------------------------------------------------------------------------
# DocumentProcessorMiddleware
# ---------------------------------------------------------------------------


class TestDocumentProcessorMiddleware:
    @pytest.mark.asyncio
    async def test_each_processor_applies_to_each_document_in_order(self, make_document) -> None:
        calls: list[str] = []
        context = IngestionContext()
        context.add_document(make_document("a", "x"))
        context.add_document(make_document("b", "y"))
        stage = DocumentProcessorMiddleware(
            [_AppendProcessor("1", calls), _AppendProcessor("2", calls)]
        )
        next_delegate = _next_mock()

        outcome = await stage.invoke(context, next_delegate, CancellationToken())

        assert outcome.succeeded
        assert calls == ["1:a", "2:a", "1:b", "2:b"]
        assert [d.content for d in context.documents] == ["x12", "y12"]
        next_delegate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_replacement_document_takes_original_position(self, make_document) -> None:
        replacement = IngestionDocument(id="a", content="replaced")
        processor = MagicMock(spec=IDocumentProcessor)
        processor.process = AsyncMock(return_value=replacement)
        context = IngestionContext()
        context.add_document(make_document("a", "original"))

        await DocumentProcessorMiddleware([processor]).invoke(
            context, _next_mock(), CancellationToken()
        )

        assert context.documents[0] is replacement

    @pytest.mark.asyncio
    async def test_changing_document_id_fails(self, make_document) -> None:
        processor = MagicMock(spec=IDocumentProcessor)
        processor.get_processor_name.return_value = "Renamer"
        processor.process = AsyncMock(return_value=IngestionDocument(id="other"))
        context = IngestionContext()
        context.add_document(make_document("a"))

        outcome = await DocumentProcessorMiddleware([processor]).invoke(
            context, _next_mock(), CancellationToken()
        )

        assert isinstance(outcome.error, PipelineError)

    @pytest.mark.asyncio
    async def test_processor_failure_stops_before_next(self, make_document) -> None:
        processor = MagicMock(spec=IDocumentProcessor)
        processor.process = AsyncMock(side_effect=RuntimeError("llm down"))
        context = IngestionContext()
        context.add_document(make_document("a"))
        next_delegate = _next_mock()

        outcome = await DocumentProcessorMiddleware([processor]).invoke(
            context, next_delegate, CancellationToken()
        )

        assert isinstance(outcome.error, RuntimeError)
        assert outcome.stage == "DocumentProcessorMiddleware"
        next_delegate.assert_not_awaited()


# ---------------------------------------------------------------------------
# ChunkingMiddleware
# ---------------------------------------------------------------------------


class TestChunkingMiddleware:
    @pytest.mark.asyncio
    async def test_stores_chunks_per_document_and_seals(self, make_document) -> None:
        context = IngestionContext()
        context.add_document(make_document("a"))
        context.add_document(make_document("b"))
        strategy = _strategy_returning({"a": ["a0", "a1"], "b": ["b0"]})
        next_delegate = _next_mock()

        outcome = await ChunkingMiddleware(strategy).invoke(
            context, next_delegate, CancellationToken()
        )

        assert outcome.succeeded
        assert [c.content for c in context.chunks_by_document["a"]] == ["a0", "a1"]
        assert [c.content for c in context.chunks_by_document["b"]] == ["b0"]
        assert all(d.is_sealed for d in context.documents)
        next_delegate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_token_is_handed_to_the_strategy(self, make_document) -> None:
        context = IngestionContext()
        document = make_document("a")
        context.add_document(document)
        strategy = _strategy_returning({"a": ["a0"]})
        token = CancellationToken()

        await ChunkingMiddleware(strategy).invoke(context, _next_mock(), token)

        strategy.chunk.assert_awaited_once_with(document, token)

    @pytest.mark.asyncio
    async def test_chunk_processors_are_threaded_in_order(self, make_document) -> None:
        calls: list[str] = []

        class _Tagger(IChunkProcessor):
            def __init__(self, tag: str) -> None:
                self._tag = tag

            async def process(self, chunks, cancellation):
                calls.append(self._tag)
                return [
                    DocumentChunk.create(c.document_id, c.index, c.content + self._tag)
                    for c in chunks
                ]

        context = IngestionContext()
        context.add_document(make_document("a"))

        await ChunkingMiddleware(
            _strategy_returning({"a": ["x", "y"]}), [_Tagger("1"), _Tagger("2")]
        ).invoke(context, _next_mock(), CancellationToken())

        assert calls == ["1", "2"]
        assert [c.content for c in context.chunks_by_document["a"]] == ["x12", "y12"]

    @pytest.mark.asyncio
    async def test_foreign_chunks_from_processor_fail(self, make_document) -> None:
        processor = MagicMock(spec=IChunkProcessor)
        processor.get_processor_name.return_value = "Mixer"
        processor.process = AsyncMock(return_value=[DocumentChunk.create("other", 0, "z")])
        context = IngestionContext()
        context.add_document(make_document("a"))

        outcome = await ChunkingMiddleware(
            _strategy_returning({"a": ["x"]}), [processor]
        ).invoke(context, _next_mock(), CancellationToken())

        assert isinstance(outcome.error, PipelineError)
        assert "a" not in context.chunks_by_document

    @pytest.mark.asyncio
    async def test_documents_cannot_change_after_chunking(self, make_document) -> None:
        context = IngestionContext()
        context.add_document(make_document("a"))

        await ChunkingMiddleware(_strategy_returning({"a": ["x"]})).invoke(
            context, _next_mock(), CancellationToken()
        )

        with pytest.raises(Exception, match="sealed"):
            context.documents[0].content = "late edit"


# ---------------------------------------------------------------------------
# WriterMiddleware
# ---------------------------------------------------------------------------


class TestWriterMiddleware:
    @pytest.mark.asyncio
    async def test_writes_each_document_with_its_chunks(self, make_document, mock_writer) -> None:
        context = IngestionContext()
        context.add_document(make_document("a"))
        context.add_document(make_document("b"))
        chunks = [DocumentChunk.create("a", 0, "x")]
        context.chunks_by_document["a"] = chunks
        token = CancellationToken()

        outcome = await WriterMiddleware(mock_writer).invoke(context, _next_mock(), token)

        assert outcome.succeeded
        assert mock_writer.write.await_count == 2
        first, second = mock_writer.write.await_args_list
        assert first.args == (context.documents[0], chunks, token)
        assert second.args == (context.documents[1], [], token)

    @pytest.mark.asyncio
    async def test_writer_exception_is_returned_unchanged(self, make_document, mock_writer) -> None:
        error = WriterError("disk full", provider_name="mock-writer")
        mock_writer.write = AsyncMock(side_effect=error)
        context = IngestionContext()
        context.add_document(make_document("a"))
        next_delegate = _next_mock()

        outcome = await WriterMiddleware(mock_writer).invoke(
            context, next_delegate, CancellationToken()
        )

        assert outcome.error is error
        next_delegate.assert_not_awaited()


# ---------------------------------------------------------------------------
# ErrorHandlingMiddleware
# ---------------------------------------------------------------------------


class TestErrorHandlingMiddleware:
    @pytest.mark.asyncio
    async def test_failure_outcome_becomes_recorded_error(self) -> None:
        context = IngestionContext()
        next_delegate = AsyncMock(
            return_value=StageOutcome.failure(ValueError("bad input"), stage="ReaderMiddleware")
        )

        outcome = await ErrorHandlingMiddleware().invoke(context, next_delegate, CancellationToken())

        assert outcome.succeeded
        assert len(context.errors) == 1
        record = context.errors[0]
        assert record.stage == "ReaderMiddleware"
        assert record.error_type == "ValueError"
        assert str(record) == "ReaderMiddleware: bad input"

    @pytest.mark.asyncio
    async def test_escaping_exception_is_recorded(self) -> None:
        context = IngestionContext()
        next_delegate = AsyncMock(side_effect=RuntimeError("custom delegate"))

        outcome = await ErrorHandlingMiddleware().invoke(context, next_delegate, CancellationToken())

        assert outcome.succeeded
        assert context.errors[0].message == "custom delegate"

    @pytest.mark.asyncio
    async def test_success_leaves_errors_empty(self) -> None:
        context = IngestionContext()

        outcome = await ErrorHandlingMiddleware().invoke(context, _next_mock(), CancellationToken())

        assert outcome.succeeded
        assert context.errors == []
