"""Token counters used by the chunking strategies.

:class:`WhitespaceTokenCounter` counts whitespace-separated words and has
no dependencies; it is the default and keeps tests deterministic.
:class:`HuggingFaceTokenCounter` wraps a HuggingFace ``tokenizers``
tokenizer so chunk budgets match the embedding model's own token count.
The tokenizer is loaded lazily on first use; load or encode failures are
raised as :class:`~ingestkit.utils.errors.TokenizerError`.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog
from tokenizers import Tokenizer

from ingestkit.interfaces.chunking import ITokenCounter
from ingestkit.utils.errors import ConfigurationError, TokenizerError

logger = structlog.get_logger(logger_name=__name__)

_WORD = re.compile(r"\S+")


class WhitespaceTokenCounter(ITokenCounter):
    """One token per run of non-whitespace characters."""

    def count(self, text: str) -> int:
        if not text:
            return 0
        return len(_WORD.findall(text))

    def get_counter_name(self) -> str:
        return "whitespace"


class HuggingFaceTokenCounter(ITokenCounter):
    """Counts tokens with a HuggingFace fast tokenizer.

    Parameters
    ----------
    model_name:
        A model id on the HuggingFace hub (e.g. ``"bert-base-uncased"``)
        or a path to a local ``tokenizer.json`` file.
    tokenizer:
        An already loaded :class:`tokenizers.Tokenizer`; skips loading.
    """

    def __init__(
        self,
        model_name: str = "bert-base-uncased",
        tokenizer: Tokenizer | None = None,
    ) -> None:
        self._model_name = model_name
        self._tokenizer = tokenizer

    def get_counter_name(self) -> str:
        return f"huggingface:{self._model_name}"

    def count(self, text: str) -> int:
        if not text:
            return 0
        tokenizer = self._load()
        try:
            encoding = tokenizer.encode(text, add_special_tokens=False)
        except Exception as exc:
            raise TokenizerError(
                message=f"Failed to encode text: {exc}",
                provider_name=self.get_counter_name(),
            ) from exc
        return len(encoding.ids)

    def _load(self) -> Tokenizer:
        if self._tokenizer is not None:
            return self._tokenizer
        try:
            if Path(self._model_name).is_file():
                self._tokenizer = Tokenizer.from_file(self._model_name)
            else:
                self._tokenizer = Tokenizer.from_pretrained(self._model_name)
        except Exception as exc:
            raise TokenizerError(
                message=f"Failed to load tokenizer '{self._model_name}': {exc}",
                provider_name=self.get_counter_name(),
            ) from exc
        logger.info("tokenizer_loaded", model=self._model_name)
        return self._tokenizer


def create_token_counter(kind: str = "whitespace", model_name: str = "bert-base-uncased") -> ITokenCounter:
    """Build a token counter by name (``whitespace`` or ``huggingface``)."""
    normalized = kind.strip().lower()
    if normalized == "whitespace":
        return WhitespaceTokenCounter()
    if normalized == "huggingface":
        return HuggingFaceTokenCounter(model_name=model_name)
    raise ConfigurationError(
        f"Unknown tokenizer '{kind}'. Expected one of: whitespace, huggingface"
    )
