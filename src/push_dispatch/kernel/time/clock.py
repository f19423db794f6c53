"""Kernel time – Clock protocol + implementations.

Push payloads carry millisecond epoch timestamps, so every clock exposes
``millis()`` next to ``now()``.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch for an aware ``datetime``."""
    return int(moment.timestamp() * 1000)


class Clock(Protocol):
    """Port: abstract clock for deterministic testing."""

    def now(self) -> datetime: ...
    def millis(self) -> int: ...


class SystemClock:
    """Production clock that delegates to ``datetime.now(UTC)``."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def millis(self) -> int:
        return epoch_millis(self.now())


class FrozenClock:
    """Test clock pinned to a fixed point in time."""

    def __init__(self, fixed: datetime) -> None:
        self._fixed = fixed

    def now(self) -> datetime:
        return self._fixed

    def millis(self) -> int:
        return epoch_millis(self._fixed)

    def advance(self, **kwargs: int | float) -> None:
        """Advance the frozen time by the given ``timedelta`` kwargs."""
        self._fixed += timedelta(**kwargs)


def utc_now() -> datetime:
    """Shorthand for ``datetime.now(UTC)``."""
    return datetime.now(UTC)


__all__ = ["Clock", "FrozenClock", "SystemClock", "epoch_millis", "utc_now"]
