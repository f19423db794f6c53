"""Resilience – TransportRetryPolicy backed by ``tenacity``.

Only transient failures are retried: connection errors, timeouts and 5xx
responses.  Anything else (an invalid API key, a malformed request) fails on
the first attempt.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

import tenacity

from push_dispatch.kernel.errors import TransportError
from push_dispatch.observability.logging import get_logger

T = TypeVar("T")

DEFAULT_TRANSPORT_ATTEMPTS = 5

logger = get_logger(__name__)


def is_transient(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.transient


def _log_retry(state: tenacity.RetryCallState) -> None:
    outcome = state.outcome
    logger.debug(
        "transport_retry",
        attempt=state.attempt_number,
        wait_seconds=round(state.next_action.sleep, 3) if state.next_action else None,
        error=repr(outcome.exception()) if outcome is not None else None,
    )


class TransportRetryPolicy:
    """Retry an async provider call a bounded number of times.

    Parameters
    ----------
    max_attempts:
        Total number of calls, the first one included.
    wait:
        A ``tenacity`` wait strategy.  Defaults to exponential backoff
        starting at one second and capped at sixteen.
    retry:
        A ``tenacity`` retry predicate.  Defaults to :func:`is_transient`.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_TRANSPORT_ATTEMPTS,
        wait: Any = None,
        retry: Any = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self.max_attempts = max_attempts
        self._wait = wait if wait is not None else tenacity.wait_exponential(multiplier=1, max=16)
        self._retry = retry if retry is not None else tenacity.retry_if_exception(is_transient)

    def with_attempts(self, max_attempts: int) -> TransportRetryPolicy:
        """Copy of this policy with a different attempt budget."""
        return TransportRetryPolicy(max_attempts, wait=self._wait, retry=self._retry)

    def _build_async_retrying(self) -> tenacity.AsyncRetrying:
        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=self._retry,
            before_sleep=_log_retry,
            reraise=True,
        )

    async def execute_async(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run *func* until it succeeds, fails permanently or attempts run out."""
        async for attempt in self._build_async_retrying():
            with attempt:
                result = await func()
        return result  # type: ignore[return-value]


__all__ = ["DEFAULT_TRANSPORT_ATTEMPTS", "TransportRetryPolicy", "is_transient"]
