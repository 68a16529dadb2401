"""Shared plumbing for stages that do their work before calling ``next``.

A :class:`PipelineStage` runs :meth:`PipelineStage.run`; if that raises,
the exception is logged and returned as a failed
:class:`~ingestkit.models.pipeline.StageOutcome` without calling ``next``.
Otherwise the rest of the chain runs and its outcome is returned as-is.
"""

from __future__ import annotations

from abc import abstractmethod

import structlog

from ingestkit.interfaces.middleware import IIngestionMiddleware, IngestionDelegate
from ingestkit.models.pipeline import IngestionContext, StageOutcome
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.logging import get_logger


class PipelineStage(IIngestionMiddleware):
    """Base class for the built-in read/process/chunk/write stages."""

    def __init__(self) -> None:
        self._logger: structlog.BoundLogger = get_logger(type(self).__module__)

    @abstractmethod
    async def run(self, context: IngestionContext, cancellation: CancellationToken) -> None:
        """Do this stage's own work against *context*."""

    async def invoke(
        self,
        context: IngestionContext,
        next: IngestionDelegate,
        cancellation: CancellationToken,
    ) -> StageOutcome:
        try:
            await self.run(context, cancellation)
        except Exception as exc:
            self._logger.warning(
                "stage_failed",
                run_id=context.run_id,
                stage=self.stage_name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return StageOutcome.failure(exc, stage=self.stage_name)
        return await next(context, cancellation)
