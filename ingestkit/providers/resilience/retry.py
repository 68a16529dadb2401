"""Bounded exponential-backoff retry for failure-prone remote calls.

:class:`RetryExecutor` runs an async operation, retrying on any
``Exception`` except :class:`~ingestkit.utils.errors.IngestionCancelledError`
according to a :class:`~ingestkit.models.ingestion.RetryPolicy`:

    attempt 1 fails -> wait initial_delay
    attempt 2 fails -> wait min(initial_delay * multiplier, max_delay)
    ...
    attempt max_retries + 1 fails -> the last exception is re-raised unchanged

Successful results pass through untouched.  The backoff wait observes the
calling run's :class:`~ingestkit.utils.cancellation.CancellationToken`, so a
cancellation during backoff aborts immediately.

:class:`RetryingLLMProvider` and :class:`RetryingEmbeddingProvider` apply
the same executor to every call of the provider they wrap.

Every exception is treated as transient, including permanent failures
such as authentication errors, which are therefore retried until the
policy is exhausted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from ingestkit.interfaces.embedding_provider import IEmbeddingProvider
from ingestkit.interfaces.llm_provider import ILLMProvider
from ingestkit.models.ingestion import RetryPolicy
from ingestkit.utils.cancellation import CancellationToken
from ingestkit.utils.errors import IngestionCancelledError

logger = structlog.get_logger(logger_name=__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """Runs async operations under a shared, read-only retry policy.

    Parameters
    ----------
    policy:
        Backoff settings; defaults to 3 retries starting at 1 second.
    sleep:
        Awaitable used for backoff waits instead of the cancellation-aware
        wait.  Tests inject a recorder here to observe delays.
    """

    def __init__(self, policy: RetryPolicy | None = None, sleep: Sleeper | None = None) -> None:
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        cancellation: CancellationToken | None = None,
        operation_name: str = "operation",
    ) -> T:
        """Await ``operation()`` until it succeeds or the policy is exhausted.

        Raises
        ------
        Exception
            The exception of the final attempt, unchanged.
        IngestionCancelledError
            If *cancellation* fires before an attempt or during a wait.
        """
        delays = self._policy.delays()
        attempt = 0
        while True:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            attempt += 1
            try:
                return await operation()
            except IngestionCancelledError:
                raise
            except Exception as exc:
                if attempt > len(delays):
                    logger.warning(
                        "retry_exhausted",
                        operation=operation_name,
                        attempts=attempt,
                        error_type=type(exc).__name__,
                        error=str(exc),
                    )
                    raise
                delay = delays[attempt - 1]
                logger.warning(
                    "retry_scheduled",
                    operation=operation_name,
                    attempt=attempt,
                    delay=delay,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
            await self._wait(delay, cancellation)

    async def _wait(self, delay: float, cancellation: CancellationToken | None) -> None:
        if self._sleep is not None:
            await self._sleep(delay)
            if cancellation is not None:
                cancellation.raise_if_cancelled()
        elif cancellation is not None:
            await cancellation.sleep(delay)
        else:
            await asyncio.sleep(delay)


class RetryingLLMProvider(ILLMProvider):
    """Wraps an :class:`ILLMProvider` so every completion is retried.

    Parameters
    ----------
    inner:
        The provider doing the actual work.
    executor:
        Shared executor; built from *policy* when omitted.
    cancellation:
        Default token for calls that do not pass their own.  A token given
        to :meth:`complete` takes precedence and is forwarded to *inner*.
    """

    def __init__(
        self,
        inner: ILLMProvider,
        policy: RetryPolicy | None = None,
        executor: RetryExecutor | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._inner = inner
        self._executor = executor or RetryExecutor(policy)
        self._cancellation = cancellation

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
        cancellation: CancellationToken | None = None,
    ) -> str:
        token = _pick_token(cancellation, self._cancellation)
        return await self._executor.execute(
            lambda: self._inner.complete(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                cancellation=token,
            ),
            cancellation=token,
            operation_name=f"{self._inner.get_provider_name()}.complete",
        )

    def get_provider_name(self) -> str:
        return self._inner.get_provider_name()


class RetryingEmbeddingProvider(IEmbeddingProvider):
    """Wraps an :class:`IEmbeddingProvider` so every embedding call is retried.

    Same token precedence as :class:`RetryingLLMProvider`.
    """

    def __init__(
        self,
        inner: IEmbeddingProvider,
        policy: RetryPolicy | None = None,
        executor: RetryExecutor | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._inner = inner
        self._executor = executor or RetryExecutor(policy)
        self._cancellation = cancellation

    async def embed(
        self,
        texts: list[str],
        cancellation: CancellationToken | None = None,
    ) -> list[list[float]]:
        token = _pick_token(cancellation, self._cancellation)
        return await self._executor.execute(
            lambda: self._inner.embed(texts, cancellation=token),
            cancellation=token,
            operation_name=f"{self._inner.get_provider_name()}.embed",
        )

    async def embed_single(
        self,
        text: str,
        cancellation: CancellationToken | None = None,
    ) -> list[float]:
        token = _pick_token(cancellation, self._cancellation)
        return await self._executor.execute(
            lambda: self._inner.embed_single(text, cancellation=token),
            cancellation=token,
            operation_name=f"{self._inner.get_provider_name()}.embed_single",
        )

    def get_provider_name(self) -> str:
        return self._inner.get_provider_name()


def _pick_token(
    per_call: CancellationToken | None, default: CancellationToken | None
) -> CancellationToken | None:
    return per_call if per_call is not None else default
