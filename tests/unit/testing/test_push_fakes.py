"""Unit tests for the push_dispatch.testing fakes."""

from __future__ import annotations

import asyncio

import pytest

from push_dispatch.application.push import Device, Platform, PlatformSender, PushJob
from push_dispatch.kernel.errors import TransportConnectionError
from push_dispatch.testing import (
    FAKE_SENT_AT_MS,
    FakeClock,
    InMemoryGCMTransport,
    InMemoryPlatformSender,
    SequentialIdGenerator,
)


class TestFakeClock:
    def test_pinned_to_sent_at(self) -> None:
        clock = FakeClock()
        assert clock.millis() == FAKE_SENT_AT_MS == 1_767_268_800_000
        assert clock.now().isoformat() == "2026-01-01T12:00:00+00:00"

    def test_custom_instant(self) -> None:
        assert FakeClock(1_000).millis() == 1_000

    def test_advance_millis(self) -> None:
        clock = FakeClock()
        clock.advance_millis(250)
        assert clock.millis() == FAKE_SENT_AT_MS + 250

    def test_independent_instances(self) -> None:
        a, b = FakeClock(), FakeClock()
        a.advance(seconds=1)
        assert a.millis() - b.millis() == 1000


class TestSequentialIdGenerator:
    def test_sequence(self) -> None:
        ids = SequentialIdGenerator()
        assert [ids(), ids()] == ["push-1", "push-2"]
        assert ids.issued == ["push-1", "push-2"]

    def test_prefix(self) -> None:
        assert SequentialIdGenerator("job")() == "job-1"


class TestInMemoryGCMTransport:
    def test_records_and_answers(self) -> None:
        transport = InMemoryGCMTransport(failures={"b": "NotRegistered"})
        response = asyncio.run(transport.send({"data": {}}, ["a", "b"], retries=3))
        assert response.results == [{"message_id": "0:0"}, {"error": "NotRegistered"}]
        assert response.multicast_id == 1001
        assert transport.count == 1
        assert transport.calls[0].retries == 3
        assert transport.sent_tokens == ["a", "b"]

    def test_error(self) -> None:
        transport = InMemoryGCMTransport(error=TransportConnectionError("gcm"))
        with pytest.raises(TransportConnectionError):
            asyncio.run(transport.send({}, ["a"]))
        assert transport.count == 1

    def test_reset(self) -> None:
        transport = InMemoryGCMTransport()
        asyncio.run(transport.send({}, ["a"]))
        transport.reset()
        assert transport.count == 0


class TestInMemoryPlatformSender:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryPlatformSender("ios"), PlatformSender)

    def test_reports_every_device_sent(self) -> None:
        sender = InMemoryPlatformSender("android")
        devices = [Device("a", "android"), Device("a", "android"), Device("b", "android")]
        results = asyncio.run(sender.send(PushJob(), devices))
        assert [r.device.token for r in results] == ["a", "b"]
        assert all(r.transmitted and r.device.platform is Platform.ANDROID for r in results)
        assert sender.count == 1
        assert sender.sent[0][1] == devices
        sender.reset()
        assert sender.sent == []
