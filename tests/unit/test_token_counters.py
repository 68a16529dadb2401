"""Unit tests for the whitespace and HuggingFace token counters."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from tokenizers import Tokenizer, models, pre_tokenizers

from ingestkit.services.token_counters import (
    HuggingFaceTokenCounter,
    WhitespaceTokenCounter,
    create_token_counter,
)
from ingestkit.utils.errors import ConfigurationError, TokenizerError


def _word_level_tokenizer() -> Tokenizer:
    vocab = {"[UNK]": 0, "hello": 1, "world": 2, "chunk": 3}
    tokenizer = Tokenizer(models.WordLevel(vocab=vocab, unk_token="[UNK]"))
    tokenizer.pre_tokenizer = pre_tokenizers.Whitespace()
    return tokenizer


class TestWhitespaceTokenCounter:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("", 0),
            ("   \n\t", 0),
            ("one", 1),
            ("one two  three\nfour", 4),
            ("# Heading\n\nbody.", 3),
        ],
    )
    def test_counts_whitespace_separated_runs(self, text: str, expected: int) -> None:
        assert WhitespaceTokenCounter().count(text) == expected

    def test_counter_name(self) -> None:
        assert WhitespaceTokenCounter().get_counter_name() == "whitespace"


class TestHuggingFaceTokenCounter:
    def test_counts_with_injected_tokenizer(self) -> None:
        counter = HuggingFaceTokenCounter(model_name="word-level", tokenizer=_word_level_tokenizer())

        # punctuation is its own pre-token and maps to [UNK]
        assert counter.count("hello, world") == 3
        assert counter.count("chunk") == 1
        assert counter.count("") == 0

    def test_loads_tokenizer_from_local_file(self, tmp_path: Path) -> None:
        path = tmp_path / "tokenizer.json"
        _word_level_tokenizer().save(str(path))

        counter = HuggingFaceTokenCounter(model_name=str(path))

        assert counter.count("hello world chunk") == 3
        assert counter.get_counter_name() == f"huggingface:{path}"

    def test_load_failure_raises_tokenizer_error(self) -> None:
        fake_tokenizer_cls = MagicMock()
        fake_tokenizer_cls.from_pretrained.side_effect = RuntimeError("model not found")
        counter = HuggingFaceTokenCounter(model_name="no-such/model")

        with patch("ingestkit.services.token_counters.Tokenizer", fake_tokenizer_cls):
            with pytest.raises(TokenizerError) as exc_info:
                counter.count("hello")

        assert exc_info.value.provider_name == "huggingface:no-such/model"
        fake_tokenizer_cls.from_pretrained.assert_called_once_with("no-such/model")

    def test_tokenizer_is_loaded_once(self) -> None:
        fake_tokenizer_cls = MagicMock()
        fake_tokenizer_cls.from_pretrained.return_value = _word_level_tokenizer()
        counter = HuggingFaceTokenCounter(model_name="hub/model")

        with patch("ingestkit.services.token_counters.Tokenizer", fake_tokenizer_cls):
            counter.count("hello")
            counter.count("world")

        fake_tokenizer_cls.from_pretrained.assert_called_once()

    def test_encode_failure_raises_tokenizer_error(self) -> None:
        broken = MagicMock()
        broken.encode.side_effect = RuntimeError("bad input")
        counter = HuggingFaceTokenCounter(model_name="broken", tokenizer=broken)

        with pytest.raises(TokenizerError, match="bad input"):
            counter.count("hello")


class TestCreateTokenCounter:
    def test_whitespace_is_the_default(self) -> None:
        assert isinstance(create_token_counter(), WhitespaceTokenCounter)

    def test_huggingface_by_name(self) -> None:
        counter = create_token_counter(" HuggingFace ", "bert-base-cased")
        assert isinstance(counter, HuggingFaceTokenCounter)
        assert counter.get_counter_name() == "huggingface:bert-base-cased"

    def test_unknown_kind(self) -> None:
        with pytest.raises(ConfigurationError):
            create_token_counter("sentencepiece")
