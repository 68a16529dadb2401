"""Retry decorators for remote AI calls."""

from ingestkit.providers.resilience.retry import (
    RetryExecutor,
    RetryingEmbeddingProvider,
    RetryingLLMProvider,
)

__all__ = ["RetryExecutor", "RetryingEmbeddingProvider", "RetryingLLMProvider"]
