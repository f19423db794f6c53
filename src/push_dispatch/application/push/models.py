"""Application push – devices, jobs and per-device delivery results."""
from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import StrEnum
from typing import Any, Iterable, Mapping

from push_dispatch.kernel.time import epoch_millis

__all__ = [
    "DeliveryResult",
    "Device",
    "Platform",
    "PushJob",
    "collapse_devices",
]


class Platform(StrEnum):
    """Push delivery ecosystems this package can send to."""

    IOS = "ios"
    ANDROID = "android"

    @classmethod
    def names(cls) -> list[str]:
        return [p.value for p in cls]


@dataclasses.dataclass(frozen=True)
class Device:
    """A push target.

    ``platform`` is normalised to :class:`Platform` when it names a known
    ecosystem; other values are kept as plain strings so classification can
    skip them.
    """

    token: str
    platform: Platform | str
    app_identifier: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.platform, Platform) and self.platform in Platform.names():
            object.__setattr__(self, "platform", Platform(self.platform))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Device:
        """Build from an installation record (``deviceToken``/``deviceType`` keys)."""
        return cls(
            token=raw.get("deviceToken") or raw.get("token") or "",
            platform=raw.get("deviceType") or raw.get("platform") or "",
            app_identifier=raw.get("appIdentifier") or raw.get("app_identifier"),
        )


@dataclasses.dataclass(frozen=True)
class PushJob:
    """One logical notification. ``expiration_time`` is epoch milliseconds."""

    data: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    expiration_time: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.expiration_time, datetime):
            object.__setattr__(self, "expiration_time", epoch_millis(self.expiration_time))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> PushJob:
        return cls(data=raw.get("data") or {}, expiration_time=raw.get("expiration_time"))


@dataclasses.dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one send attempt for one device.

    ``response`` is the provider's entry for the device on success, or the
    error (provider entry, :class:`~push_dispatch.kernel.errors.TransportError`
    or a synthetic ``{"error": ...}`` mapping) otherwise.
    """

    device: Device
    transmitted: bool
    response: Any = None
    batch_id: str | int | None = None


def collapse_devices(devices: Iterable[Device]) -> dict[str, Device]:
    """Key *devices* by token.

    A repeated token keeps the position of its first occurrence and the value
    of its last one.
    """
    collapsed: dict[str, Device] = {}
    for device in devices:
        collapsed[device.token] = device
    return collapsed
