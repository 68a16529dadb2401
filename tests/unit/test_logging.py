"""Unit tests for the structlog configuration helpers."""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from ingestkit.pipeline import ErrorHandlingMiddleware, IngestionPipelineBuilder, WriterMiddleware
from ingestkit.providers.writer import InMemoryDocumentWriter
from ingestkit.utils.logging import configure_logging, get_logger, run_context


@pytest.fixture()
def restore_logging():
    """Put back the session's structlog and root-logger setup afterwards."""
    saved_config = structlog.get_config()
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    structlog.configure(**saved_config)
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestConfigureLogging:
    def test_json_events_go_to_the_given_stream(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)

        structlog.get_logger("test").info("document_written", document_id="a.md")

        (event,) = _lines(stream)
        assert event["event"] == "document_written"
        assert event["document_id"] == "a.md"
        assert event["level"] == "info"
        assert "timestamp" in event

    def test_events_below_level_are_dropped(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(log_level="WARNING", json_output=True, stream=stream)

        logger = structlog.get_logger("test")
        logger.info("quiet")
        logger.warning("loud")

        assert [e["event"] for e in _lines(stream)] == ["loud"]

    def test_stdlib_loggers_share_the_renderer(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)

        logging.getLogger("thirdparty").warning("disk almost full")

        (event,) = _lines(stream)
        assert event["event"] == "disk almost full"
        assert event["level"] == "warning"


class TestRunContext:
    def test_run_id_is_attached_inside_the_block_only(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)
        logger = structlog.get_logger("test")

        with run_context("run-1", source="docs"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _lines(stream)
        assert inside["run_id"] == "run-1"
        assert inside["source"] == "docs"
        assert "run_id" not in outside


class TestHostLoggingIsLeftAlone:
    def test_building_a_pipeline_does_not_configure_logging(self, restore_logging) -> None:
        structlog.reset_defaults()
        root = logging.getLogger()
        host_handler = logging.NullHandler()
        root.addHandler(host_handler)

        (
            IngestionPipelineBuilder()
            .use(ErrorHandlingMiddleware())
            .use(WriterMiddleware(InMemoryDocumentWriter()))
            .build()
        )
        get_logger("ingestkit.test")

        assert host_handler in root.handlers
        assert not structlog.is_configured()
