"""Testing support – in-memory doubles for clocks, ids, transports and senders."""

from push_dispatch.testing.fakes import (
    FAKE_SENT_AT_MS,
    FakeClock,
    InMemoryGCMTransport,
    InMemoryPlatformSender,
    SequentialIdGenerator,
)

__all__ = [
    "FAKE_SENT_AT_MS",
    "FakeClock",
    "InMemoryGCMTransport",
    "InMemoryPlatformSender",
    "SequentialIdGenerator",
]
