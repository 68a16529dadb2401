"""Ingestion settings loaded from environment variables via pydantic-settings.

Values are read from two sources, in priority order:

  1. Environment variables prefixed with ``INGESTKIT_``, e.g.
     ``INGESTKIT_MAX_TOKENS_PER_CHUNK=512``
  2. A ``.env`` file in the working directory

Defaults apply when neither source sets a field.  List fields such as
``input_extensions`` are given as JSON in the environment
(``INGESTKIT_INPUT_EXTENSIONS='[".md", ".txt"]'``).

The helpers :meth:`Settings.chunking_options` and
:meth:`Settings.retry_policy` build the validated value objects; invalid
combinations raise :class:`~ingestkit.utils.errors.ConfigurationError`
there rather than while a run is in progress.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from ingestkit.models.ingestion import ChunkingOptions, RetryPolicy


class Settings(BaseSettings):
    """ingestkit settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="INGESTKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Chunking ===
    chunking_strategy: str = "section"  # header | section | token
    max_tokens_per_chunk: int = 2000
    overlap_tokens: int = 0
    section_heading_level: int = 2
    semantic_similarity_threshold: float = 0.75

    # === Token counting ===
    tokenizer: str = "whitespace"  # whitespace | huggingface
    tokenizer_model: str = "bert-base-uncased"

    # === Retry (remote AI calls) ===
    retry_max_retries: int = 3
    retry_initial_delay: float = 1.0
    retry_max_delay: float = 60.0
    retry_backoff_multiplier: float = 2.0

    # === Source ===
    input_extensions: list[str] = [".md", ".markdown", ".txt"]

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def chunking_options(self) -> ChunkingOptions:
        return ChunkingOptions(
            max_tokens_per_chunk=self.max_tokens_per_chunk,
            overlap_tokens=self.overlap_tokens,
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.retry_max_retries,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            backoff_multiplier=self.retry_backoff_multiplier,
        )
