"""Abstract base class for the text-generation collaborator.

Only two processors talk to a model: metadata extraction asks for a JSON
object describing a document, and the summary processor asks for one
short summary per chunk.  Both go through :class:`ILLMProvider`, so a
hosted API, a local server or a test double can be swapped in freely.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestkit.utils.cancellation import CancellationToken


# Concrete implementations: RetryingLLMProvider (decorator over any provider)
# Located in: ingestkit/providers/resilience/
class ILLMProvider(ABC):
    """Contract for prompt-in, text-out model calls."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
        cancellation: CancellationToken | None = None,
    ) -> str:
        """Return the model's reply to *user_prompt* under *system_prompt*.

        *temperature* and *max_tokens* are forwarded as-is; the processors
        pass low temperatures.
        *cancellation* is the calling run's token, when there is one.

        Raises
        ------
        ingestkit.utils.errors.LLMError
            On transport failures or an unusable reply.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short backend name used in log events and error messages."""
