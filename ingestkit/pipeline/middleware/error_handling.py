"""Error-handling stage: convert failures into recorded errors.

Register this stage first.  It runs the rest of the chain and, when that
produces a failed :class:`~ingestkit.models.pipeline.StageOutcome` (or a
custom delegate lets an exception escape), appends an
:class:`~ingestkit.models.pipeline.IngestionErrorRecord` to
``context.errors``, logs it and reports success.  Nothing after the failed
stage runs; the record is the only trace of the failure, so callers must
inspect ``context.errors`` after every run.
"""

from __future__ import annotations

import structlog

from ingestkit.interfaces.middleware import IIngestionMiddleware, IngestionDelegate
from ingestkit.models.pipeline import IngestionContext, StageOutcome
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.logging import get_logger


class ErrorHandlingMiddleware(IIngestionMiddleware):
    """Record any downstream failure on the context instead of raising it."""

    def __init__(self) -> None:
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def invoke(
        self,
        context: IngestionContext,
        next: IngestionDelegate,
        cancellation: CancellationToken,
    ) -> StageOutcome:
        try:
            outcome = await next(context, cancellation)
        except Exception as exc:
            outcome = StageOutcome.failure(exc)

        if outcome.succeeded:
            return outcome

        record = context.record_error(outcome.error, stage=outcome.stage)
        self._logger.error(
            "ingestion_error_recorded",
            run_id=context.run_id,
            stage=record.stage,
            error_type=record.error_type,
            error=record.message,
        )
        return StageOutcome.success()
