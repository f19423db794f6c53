"""Application push – ports implemented by platform adapters."""
from __future__ import annotations

from typing import Callable, Protocol, Sequence, runtime_checkable

from push_dispatch.application.push.models import DeliveryResult, Device, PushJob

__all__ = ["Classifier", "PlatformSender"]

Classifier = Callable[[Sequence[Device], Sequence[str]], dict[str, list[Device]]]


@runtime_checkable
class PlatformSender(Protocol):
    """Port: deliver one job to the devices of a single platform.

    Implementations return exactly one :class:`DeliveryResult` per distinct
    device token and report provider failures as ``transmitted=False``
    results instead of raising.
    """

    async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]: ...
