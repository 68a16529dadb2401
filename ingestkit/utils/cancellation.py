"""Cooperative cancellation for ingestion runs.

A :class:`CancellationToken` wraps an :class:`asyncio.Event`.  The pipeline
creates one per run (unless the caller supplies one) and threads it through
every stage and collaborator call.  Stages call
:meth:`CancellationToken.raise_if_cancelled` at each iteration boundary
(per file, per document, per processor), and the retry executor waits on
the token instead of sleeping blindly so a cancellation during backoff is
observed immediately.

Cancellation surfaces as :class:`~ingestkit.utils.errors.IngestionCancelledError`
rather than :class:`asyncio.CancelledError` so that the error-handling stage
can record it like any other failure.
"""

from __future__ import annotations

import asyncio

from ingestkit.utils.errors import IngestionCancelledError


class CancellationToken:
    """A one-shot cancellation signal shared by every stage of one run."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = "Ingestion run was cancelled"

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str | None = None) -> None:
        """Signal cancellation.  Subsequent calls are no-ops."""
        if self._event.is_set():
            return
        if reason:
            self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise :class:`IngestionCancelledError` if the token has fired."""
        if self._event.is_set():
            raise IngestionCancelledError(self._reason)

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    async def sleep(self, delay: float) -> None:
        """Sleep for *delay* seconds unless cancelled first.

        Raises
        ------
        IngestionCancelledError
            If the token fires before or during the wait.
        """
        self.raise_if_cancelled()
        if delay <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()
