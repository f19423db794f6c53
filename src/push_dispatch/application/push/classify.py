"""Application push – partition devices into per-platform buckets."""
from __future__ import annotations

from typing import Iterable, Sequence

from push_dispatch.application.push.models import Device

__all__ = ["classify_devices"]


def classify_devices(devices: Iterable[Device], valid_types: Sequence[str]) -> dict[str, list[Device]]:
    """Bucket *devices* by platform, one (possibly empty) bucket per valid type.

    Buckets follow the order of *valid_types*.  Devices with an empty token or
    an unsupported platform are dropped.
    """
    buckets: dict[str, list[Device]] = {str(t): [] for t in valid_types}
    for device in devices:
        if not device.token:
            continue
        bucket = buckets.get(str(device.platform))
        if bucket is not None:
            bucket.append(device)
    return buckets
