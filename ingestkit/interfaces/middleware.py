"""Abstract base class for ingestion pipeline stages.

A stage receives the run context, a ``next`` delegate representing the
rest of the chain, and a cancellation token.  It may act before calling
``next``, after it returns, or instead of calling it.  Every stage returns
a :class:`~ingestkit.models.pipeline.StageOutcome`: a stage that fails in
its own work returns a failure outcome and does not call ``next``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ingestkit.models.pipeline import IngestionContext, StageOutcome
    from ingestkit.utils.cancellation import CancellationToken

# Signature shared by the terminal no-op, every composed chain link and
# every plain-function stage registered with ``use_delegate``.
IngestionDelegate = Callable[
    ["IngestionContext", "CancellationToken"], Awaitable["StageOutcome"]
]


# Concrete implementations: ErrorHandlingMiddleware, ReaderMiddleware,
#   DocumentProcessorMiddleware, ChunkingMiddleware, WriterMiddleware
# Located in: ingestkit/pipeline/middleware/
class IIngestionMiddleware(ABC):
    """Contract for a single stage in the ingestion chain."""

    @abstractmethod
    async def invoke(
        self,
        context: IngestionContext,
        next: IngestionDelegate,
        cancellation: CancellationToken,
    ) -> StageOutcome:
        """Run this stage and (normally) the rest of the chain.

        Parameters
        ----------
        context:
            Run-scoped state shared by all stages.
        next:
            The remainder of the chain.  Calling it at most once is
            expected; not calling it stops the chain at this stage.
        cancellation:
            Cooperative cancellation token for the whole run.
        """

    @property
    def stage_name(self) -> str:
        return type(self).__name__
