"""Chain-of-responsibility engine for the ingestion pipeline.

:class:`IngestionPipelineBuilder` collects stage factories in registration
order; :meth:`IngestionPipelineBuilder.build` freezes them into an
:class:`IngestionPipeline`.  Each factory receives the delegate for "the
rest of the chain" and returns the delegate for its own position, so the
chain is composed by a right fold over the factories ending in a terminal
delegate that does nothing.

ARCHITECTURE NOTE:
    The engine itself recovers from nothing.  Every stage returns a
    :class:`~ingestkit.models.pipeline.StageOutcome`; if the outcome that
    reaches :meth:`IngestionPipeline.execute` is a failure, the original
    exception is re-raised to the caller.  Installing an
    :class:`~ingestkit.pipeline.middleware.error_handling.ErrorHandlingMiddleware`
    first turns failures into records on ``context.errors`` instead, so
    callers that install it must inspect those records after every run.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from ingestkit.interfaces.middleware import IIngestionMiddleware, IngestionDelegate
from ingestkit.models.pipeline import IngestionContext, StageOutcome
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.logging import get_logger, run_context

MiddlewareFactory = Callable[[IngestionDelegate], IngestionDelegate]


async def _terminal(context: IngestionContext, cancellation: CancellationToken) -> StageOutcome:
    return StageOutcome.success()


def _middleware_factory(middleware: IIngestionMiddleware) -> MiddlewareFactory:
    def factory(next_delegate: IngestionDelegate) -> IngestionDelegate:
        async def invoke(context: IngestionContext, cancellation: CancellationToken) -> StageOutcome:
            return await middleware.invoke(context, next_delegate, cancellation)

        return invoke

    return factory


class IngestionPipeline:
    """An immutable, reusable chain of ingestion stages.

    The same pipeline may execute many runs, including concurrently, as
    long as each run gets its own :class:`IngestionContext`.
    """

    def __init__(self, factories: tuple[MiddlewareFactory, ...]) -> None:
        self._factories = factories
        delegate: IngestionDelegate = _terminal
        for factory in reversed(factories):
            delegate = factory(delegate)
        self._chain = delegate
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def stage_count(self) -> int:
        return len(self._factories)

    async def execute(
        self,
        context: IngestionContext,
        cancellation: CancellationToken | None = None,
    ) -> IngestionContext:
        """Run the composed chain once against *context*.

        Parameters
        ----------
        context:
            Fresh run-scoped state.  It is mutated in place and returned.
        cancellation:
            Optional token; a new one is created when omitted.

        Raises
        ------
        Exception
            The original exception of a failed stage, when no
            error-handling stage converted the failure into a record.
        """
        token = cancellation if cancellation is not None else CancellationToken()

        with run_context(context.run_id):
            self._logger.info("pipeline_run_start", stages=self.stage_count)
            outcome = await self._chain(context, token)

        if not outcome.succeeded:
            self._logger.error(
                "pipeline_run_failed",
                run_id=context.run_id,
                stage=outcome.stage,
                error_type=type(outcome.error).__name__,
                error=str(outcome.error),
            )
            raise outcome.error

        summary = context.summary()
        self._logger.info(
            "pipeline_run_complete",
            run_id=context.run_id,
            documents=summary.documents,
            chunks=summary.chunks,
            errors=summary.errors,
            duration_seconds=round(summary.duration_seconds, 3),
        )
        return context


class IngestionPipelineBuilder:
    """Fluent builder that records stages in the order they will run.

    Usage::

        pipeline = (
            IngestionPipelineBuilder()
            .use(ErrorHandlingMiddleware())
            .use(ReaderMiddleware(source, decoders))
            .use(ChunkingMiddleware(strategy))
            .use(WriterMiddleware(writer))
            .build()
        )
        context = await pipeline.execute(IngestionContext())
    """

    def __init__(self) -> None:
        self._factories: list[MiddlewareFactory] = []

    def use(self, middleware: IIngestionMiddleware) -> IngestionPipelineBuilder:
        """Append a middleware object as the next stage."""
        self._factories.append(_middleware_factory(middleware))
        return self

    def use_delegate(self, factory: MiddlewareFactory) -> IngestionPipelineBuilder:
        """Append a raw factory ``(next) -> delegate`` as the next stage."""
        self._factories.append(factory)
        return self

    def build(self) -> IngestionPipeline:
        """Freeze the registered stages into an :class:`IngestionPipeline`.

        The builder may keep being used afterwards; pipelines already built
        are unaffected.
        """
        return IngestionPipeline(tuple(self._factories))
