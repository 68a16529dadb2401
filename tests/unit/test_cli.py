"""Unit tests for the ingestkit command-line interface."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ingestkit.cli.ingest import _apply_overrides, _build_parser, build_pipeline, main
from ingestkit.config.settings import Settings
from ingestkit.models.pipeline import IngestionContext
from ingestkit.providers.writer import InMemoryDocumentWriter
from ingestkit.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Empty working directory, no INGESTKIT_* variables, logging untouched."""
    for key in list(os.environ):
        if key.startswith("INGESTKIT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    with patch("ingestkit.cli.ingest.configure_logging") as configure:
        yield configure


@pytest.fixture()
def docs(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    (root / "a.md").write_text(
        "# Intro\nalpha beta\n\n## Details\ngamma delta epsilon", encoding="utf-8"
    )
    (root / "notes.txt").write_text("plain words here", encoding="utf-8")
    (root / "photo.png").write_bytes(b"\x89PNG")
    return root


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParser:
    def test_ingest_arguments(self) -> None:
        args = _build_parser().parse_args(
            ["ingest", "--path", "docs", "--strategy", "token", "--max-tokens", "64", "--overlap", "8"]
        )

        assert args.command == "ingest"
        assert args.path == "docs"
        assert args.strategy == "token"
        assert args.max_tokens == 64
        assert args.overlap == 8
        assert args.show_chunks is False
        assert args.config == "config/ingestkit.yaml"

    def test_unknown_strategy_is_rejected(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["ingest", "--path", "docs", "--strategy", "semantic"])

        assert exc_info.value.code == 2

    def test_overrides_only_replace_given_values(self) -> None:
        args = _build_parser().parse_args(["ingest", "--path", "docs", "--max-tokens", "64"])

        settings = _apply_overrides(Settings(chunking_strategy="header"), args)

        assert settings.max_tokens_per_chunk == 64
        assert settings.chunking_strategy == "header"


class TestMain:
    def test_no_command_prints_help_and_fails(self, capsys) -> None:
        assert _run([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_config_command_prints_resolved_settings(self, tmp_path: Path, capsys) -> None:
        config = tmp_path / "ingestkit.yaml"
        config.write_text("chunking:\n  strategy: header\n", encoding="utf-8")

        assert _run(["--config", str(config), "config"]) == 0

        out = capsys.readouterr().out
        assert "Resolved settings" in out
        assert "chunking_strategy" in out
        assert "header" in out

    def test_invalid_yaml_exits_with_error(self, tmp_path: Path, capsys) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("chunking: [oops\n", encoding="utf-8")

        assert _run(["--config", str(config), "config"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_malformed_environment_value_is_reported(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("INGESTKIT_MAX_TOKENS_PER_CHUNK", "abc")

        assert _run(["config"]) == 1
        err = capsys.readouterr().err
        assert "Error:" in err
        assert "max_tokens_per_chunk" in err

    def test_ingest_prints_summary(self, docs: Path, capsys) -> None:
        code = _run(
            ["ingest", "--path", str(docs), "--strategy", "header", "--max-tokens", "5", "--show-chunks"]
        )

        out = capsys.readouterr().out
        assert code == 0
        assert "Ingesting directory:" in out
        assert "Documents:       2" in out
        assert "Chunks created:  3" in out
        assert "Errors:          0" in out
        assert "a.md (2 chunks)" in out
        assert "notes.txt (1 chunks)" in out

    def test_json_logs_flag_is_forwarded(self, docs: Path, isolated_cli: MagicMock) -> None:
        _run(["--json-logs", "ingest", "--path", str(docs)])

        isolated_cli.assert_called_once_with(log_level="INFO", json_output=True)

    def test_recorded_errors_set_exit_code(self, docs: Path, capsys) -> None:
        (docs / "broken.txt").write_bytes(b"\xff\xfe\x81")

        assert _run(["ingest", "--path", str(docs)]) == 1
        assert "Error: " in capsys.readouterr().err

    def test_invalid_budget_is_reported(self, docs: Path, capsys) -> None:
        assert _run(["ingest", "--path", str(docs), "--max-tokens", "5", "--overlap", "5"]) == 1
        assert "overlap_tokens" in capsys.readouterr().err

    def test_missing_directory_is_reported(self, tmp_path: Path, capsys) -> None:
        assert _run(["ingest", "--path", str(tmp_path / "nowhere")]) == 1
        assert "does not exist" in capsys.readouterr().err


class TestBuildPipeline:
    @pytest.mark.asyncio
    async def test_standard_chain_ingests_source(self, make_source, make_file) -> None:
        source = make_source([make_file("one.md", "# One\n\nbody"), make_file("skip.pdf", b"%PDF")])
        writer = InMemoryDocumentWriter()
        pipeline = build_pipeline(Settings(), source, writer)

        context = await pipeline.execute(IngestionContext())

        assert pipeline.stage_count == 5
        assert writer.document_ids == ["one.md"]
        assert not context.has_errors

    def test_semantic_strategy_needs_an_embedding_provider(self, make_source) -> None:
        with pytest.raises(ConfigurationError):
            build_pipeline(Settings(chunking_strategy="semantic"), make_source([]), InMemoryDocumentWriter())

    def test_extensions_without_decoder_are_rejected(self, make_source) -> None:
        with pytest.raises(ConfigurationError, match="No decoder"):
            build_pipeline(Settings(input_extensions=[".pdf"]), make_source([]), InMemoryDocumentWriter())
