"""Abstract base class for the vector-embedding collaborator.

Semantic-similarity chunking embeds every paragraph of a document and
starts a new chunk wherever the cosine similarity of neighbours drops
below a threshold.  That is the only consumer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestkit.utils.cancellation import CancellationToken


# Concrete implementations: RetryingEmbeddingProvider (decorator over any provider)
# Located in: ingestkit/providers/resilience/
class IEmbeddingProvider(ABC):
    """Contract for turning text into fixed-width float vectors."""

    @abstractmethod
    async def embed(
        self,
        texts: list[str],
        cancellation: CancellationToken | None = None,
    ) -> list[list[float]]:
        """Embed *texts* in one call.

        The result has one vector per input, in input order, and every
        vector has the same length.  *cancellation* is the calling run's
        token, when there is one.

        Raises
        ------
        ingestkit.utils.errors.EmbeddingServiceError
            If the backend cannot produce the vectors.
        """

    @abstractmethod
    async def embed_single(
        self,
        text: str,
        cancellation: CancellationToken | None = None,
    ) -> list[float]:
        """Embed one string."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short backend name used in log events and error messages."""
