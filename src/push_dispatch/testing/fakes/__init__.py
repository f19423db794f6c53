"""Testing fakes – in-memory doubles for kernel and adapter ports."""
from push_dispatch.testing.fakes.clock import FAKE_SENT_AT_MS, FakeClock
from push_dispatch.testing.fakes.ids import SequentialIdGenerator
from push_dispatch.testing.fakes.senders import InMemoryPlatformSender
from push_dispatch.testing.fakes.transport import InMemoryGCMTransport

__all__ = [
    "FAKE_SENT_AT_MS",
    "FakeClock",
    "InMemoryGCMTransport",
    "InMemoryPlatformSender",
    "SequentialIdGenerator",
]
