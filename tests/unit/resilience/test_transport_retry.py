"""Unit tests for TransportRetryPolicy."""

from __future__ import annotations

import asyncio

import pytest
import tenacity

from push_dispatch.kernel.errors import TransportConnectionError, TransportError, TransportTimeoutError
from push_dispatch.resilience import DEFAULT_TRANSPORT_ATTEMPTS, TransportRetryPolicy, is_transient


def _policy(attempts: int = DEFAULT_TRANSPORT_ATTEMPTS) -> TransportRetryPolicy:
    return TransportRetryPolicy(attempts, wait=tenacity.wait_none())


class Failing:
    def __init__(self, *errors: Exception, result: str = "ok") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestIsTransient:
    @pytest.mark.parametrize(
        "exc, expected",
        [
            (TransportConnectionError("gcm"), True),
            (TransportTimeoutError("gcm"), True),
            (TransportError("gcm", status_code=503), True),
            (TransportError("gcm", status_code=401), False),
            (TransportError("gcm"), False),
            (ValueError("x"), False),
        ],
    )
    def test_classification(self, exc: Exception, expected: bool) -> None:
        assert is_transient(exc) is expected


class TestTransportRetryPolicy:
    def test_default_attempts(self) -> None:
        assert TransportRetryPolicy().max_attempts == 5

    def test_rejects_non_positive_attempts(self) -> None:
        with pytest.raises(ValueError):
            TransportRetryPolicy(0)

    def test_success_first_try(self) -> None:
        func = Failing()
        assert asyncio.run(_policy().execute_async(func)) == "ok"
        assert func.calls == 1

    def test_transient_failures_retried(self) -> None:
        func = Failing(TransportConnectionError("gcm"), TransportError("gcm", status_code=500))
        assert asyncio.run(_policy().execute_async(func)) == "ok"
        assert func.calls == 3

    def test_permanent_failure_raised_immediately(self) -> None:
        func = Failing(TransportError("gcm", status_code=400))
        with pytest.raises(TransportError):
            asyncio.run(_policy().execute_async(func))
        assert func.calls == 1

    def test_last_error_reraised_when_exhausted(self) -> None:
        func = Failing(*(TransportTimeoutError("gcm") for _ in range(5)))
        with pytest.raises(TransportTimeoutError):
            asyncio.run(_policy(3).execute_async(func))
        assert func.calls == 3

    def test_with_attempts_keeps_strategy(self) -> None:
        func = Failing(TransportConnectionError("apns"), TransportConnectionError("apns"))
        policy = _policy(1).with_attempts(3)
        assert policy.max_attempts == 3
        assert asyncio.run(policy.execute_async(func)) == "ok"
