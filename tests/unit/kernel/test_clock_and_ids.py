"""Unit tests for kernel clock and push-id helpers."""

from __future__ import annotations

from datetime import UTC, datetime

from push_dispatch.kernel.time import FrozenClock, SystemClock, epoch_millis
from push_dispatch.kernel.types import random_push_id
from push_dispatch.kernel.types.ids import PUSH_ID_ALPHABET, PUSH_ID_LENGTH


class TestEpochMillis:
    def test_epoch_origin(self) -> None:
        assert epoch_millis(datetime(1970, 1, 1, tzinfo=UTC)) == 0

    def test_keeps_milliseconds(self) -> None:
        moment = datetime(2026, 1, 1, 12, 0, 0, 250000, tzinfo=UTC)
        assert epoch_millis(moment) % 1000 == 250


class TestSystemClock:
    def test_now_is_utc_aware(self) -> None:
        assert SystemClock().now().utcoffset().total_seconds() == 0  # type: ignore[union-attr]

    def test_millis_close_to_now(self) -> None:
        expected = datetime.now(UTC).timestamp() * 1000
        assert abs(SystemClock().millis() - expected) < 1000


class TestFrozenClock:
    def test_millis_is_fixed(self) -> None:
        clk = FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))
        assert clk.millis() == clk.millis() == 1767268800000

    def test_advance(self) -> None:
        clk = FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))
        before = clk.millis()
        clk.advance(seconds=3)
        assert clk.millis() - before == 3000


class TestRandomPushId:
    def test_default_length_and_alphabet(self) -> None:
        push_id = random_push_id()
        assert len(push_id) == PUSH_ID_LENGTH
        assert set(push_id) <= set(PUSH_ID_ALPHABET)

    def test_custom_length(self) -> None:
        assert len(random_push_id(24)) == 24

    def test_fresh_each_call(self) -> None:
        assert len({random_push_id() for _ in range(50)}) == 50
