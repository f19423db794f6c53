"""Application push – PushDispatcher routes one job to every platform sender."""
from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from push_dispatch.application.push.classify import classify_devices
from push_dispatch.application.push.models import DeliveryResult, Device, Platform, PushJob, collapse_devices
from push_dispatch.application.push.ports import Classifier, PlatformSender
from push_dispatch.config.settings import PushSettings
from push_dispatch.kernel.errors import ClassificationError, PushMisconfiguredError
from push_dispatch.kernel.time import Clock
from push_dispatch.kernel.types import IdGenerator
from push_dispatch.observability.logging import get_logger

__all__ = ["PushDispatcher"]

logger = get_logger(__name__)


class PushDispatcher:
    """Fan a push job out to the configured platform senders.

    ``push_config`` maps platform names to one credential or a list of
    credentials.  Platforms left out of the configuration still get a result
    per device, with ``transmitted=False``.

    Example::

        dispatcher = PushDispatcher({"android": {"apiKey": "..."}})
        results = await dispatcher.send(PushJob(data={"alert": "hi"}), devices)
    """

    supports_push_tracking = True
    feature: Mapping[str, bool] = MappingProxyType({"immediate_push": True})

    def __init__(
        self,
        push_config: Mapping[str, Any] | None = None,
        *,
        classifier: Classifier | None = None,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        push_config = push_config or {}
        self.valid_push_types: list[str] = Platform.names()
        self._check_supported(push_config)
        self._classifier = classifier or classify_devices
        self._senders: dict[Platform, PlatformSender | None] = {platform: None for platform in Platform}
        for push_type, config in push_config.items():
            platform = Platform(push_type)
            self._senders[platform] = self._build_sender(platform, config, clock, id_generator)

    @classmethod
    def from_senders(
        cls,
        senders: Mapping[str, PlatformSender],
        *,
        classifier: Classifier | None = None,
    ) -> PushDispatcher:
        """Build a dispatcher around ready-made senders (custom transports, fakes)."""
        dispatcher = cls(classifier=classifier)
        dispatcher._check_supported(senders)
        for push_type, sender in senders.items():
            dispatcher._senders[Platform(push_type)] = sender
        return dispatcher

    @classmethod
    def from_settings(cls, settings: PushSettings, **kwargs: Any) -> PushDispatcher:
        return cls(settings.to_push_config(), **kwargs)

    @staticmethod
    def classify_installations(devices: Iterable[Device], valid_types: Sequence[str]) -> dict[str, list[Device]]:
        return classify_devices(devices, valid_types)

    def get_valid_push_types(self) -> list[str]:
        return list(self.valid_push_types)

    def sender_for(self, platform: str) -> PlatformSender | None:
        if platform not in self.valid_push_types:
            return None
        return self._senders[Platform(platform)]

    async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]:
        """Deliver *job* to *devices*; provider failures come back as results.

        Raises :class:`ClassificationError` when devices cannot be bucketed.
        Any other exception from a sender is raised once every platform has
        finished.
        """
        device_map = self._classify(devices)
        pending = []
        for push_type, bucket in device_map.items():
            if not bucket:
                continue
            sender = self.sender_for(push_type)
            if sender is None:
                logger.debug("push_sender_missing", push_type=push_type, devices=len(bucket))
                pending.append(self._unsent(push_type, bucket))
            else:
                pending.append(sender.send(job, bucket))

        # Wait for every branch before re-raising a sender failure.
        batches = await asyncio.gather(*pending, return_exceptions=True)
        failures = [batch for batch in batches if isinstance(batch, BaseException)]
        if failures:
            logger.error("push_sender_crashed", failures=len(failures), error=repr(failures[0]))
            raise failures[0]
        results = [result for batch in batches for result in batch]
        logger.debug(
            "push_dispatched",
            devices=len(results),
            transmitted=sum(1 for r in results if r.transmitted),
        )
        return results

    def _classify(self, devices: Sequence[Device]) -> Mapping[str, list[Device]]:
        try:
            return self._classifier(list(devices), self.valid_push_types)
        except ClassificationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ClassificationError(f"Could not classify devices: {exc}", cause=exc) from exc

    async def _unsent(self, push_type: str, bucket: list[Device]) -> list[DeliveryResult]:
        response = {"error": f"no sender for platform {push_type}"}
        return [
            DeliveryResult(device=device, transmitted=False, response=response)
            for device in collapse_devices(bucket).values()
        ]

    def _check_supported(self, config: Mapping[str, Any]) -> None:
        unsupported = [str(key) for key in config if key not in self.valid_push_types]
        if unsupported:
            raise PushMisconfiguredError(
                f"Push to {', '.join(unsupported)} is not supported",
                keys=unsupported,
            )

    @staticmethod
    def _build_sender(
        platform: Platform,
        config: Any,
        clock: Clock | None,
        id_generator: IdGenerator | None,
    ) -> PlatformSender:
        # Adapters import application.push, so they cannot be imported at module level.
        if platform is Platform.IOS:
            from push_dispatch.adapters.apns import APNSSender

            return APNSSender(config, clock=clock)
        from push_dispatch.adapters.gcm import GCMSender

        return GCMSender(config, clock=clock, id_generator=id_generator)
