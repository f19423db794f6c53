"""APNs adapter – iOS platform sender."""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Callable, Sequence

from push_dispatch.adapters.apns.config import APNSCredential
from push_dispatch.adapters.apns.payload import apns_headers, build_apns_payload
from push_dispatch.adapters.apns.transport import APNSResponse, APNSTransport
from push_dispatch.application.push.models import DeliveryResult, Device, Platform, PushJob, collapse_devices
from push_dispatch.kernel.errors import TransportError
from push_dispatch.kernel.time import Clock
from push_dispatch.observability.logging import get_logger

__all__ = ["APNSSender", "APNS_RETRIES"]

APNS_RETRIES = 5

logger = get_logger(__name__)

TransportFactory = Callable[[APNSCredential], Any]


class APNSSender:
    """PlatformSender for iOS devices over APNs.

    Unlike GCM every device is its own request, so devices are routed to the
    transport whose topic matches their app identifier (else the first one)
    and results are put back in the order of the collapsed device list.
    """

    platform = Platform.IOS

    def __init__(
        self,
        config: Any,
        *,
        clock: Clock | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        credentials = APNSCredential.parse_many(config)
        factory = transport_factory or (lambda credential: APNSTransport(credential, clock=clock))
        self._transports = [factory(credential) for credential in credentials]

    @property
    def transports(self) -> list[Any]:
        return list(self._transports)

    async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]:
        devices_map = collapse_devices(devices)
        if not devices_map:
            return []
        payload = build_apns_payload(job.data)

        groups: dict[int, list[str]] = {}
        for token, device in devices_map.items():
            groups.setdefault(self._select_transport_index(device), []).append(token)

        outcomes = await asyncio.gather(
            *(self._send_group(self._transports[index], payload, job, tokens) for index, tokens in groups.items())
        )
        by_token: dict[str, APNSResponse | TransportError] = {}
        for tokens, responses in zip(groups.values(), outcomes):
            by_token.update(zip(tokens, responses))

        results = [self._result(devices_map[token], by_token[token]) for token in devices_map]
        logger.debug(
            "apns_sent",
            devices=len(results),
            transmitted=sum(1 for r in results if r.transmitted),
        )
        return results

    async def _send_group(
        self, transport: Any, payload: dict[str, Any], job: PushJob, tokens: list[str]
    ) -> list[APNSResponse | TransportError]:
        headers = apns_headers(payload, transport.app_identifier, job.expiration_time)
        try:
            return await transport.send(payload, headers, tokens, retries=APNS_RETRIES)
        except TransportError as exc:
            logger.error("apns_send_failed", devices=len(tokens), error=exc.to_dict())
            return [exc] * len(tokens)

    def _select_transport_index(self, device: Device) -> int:
        if device.app_identifier:
            for index, transport in enumerate(self._transports):
                if transport.app_identifier == device.app_identifier:
                    return index
        return 0

    def _result(self, device: Device, outcome: APNSResponse | TransportError) -> DeliveryResult:
        device = dataclasses.replace(device, platform=self.platform)
        if isinstance(outcome, TransportError):
            return DeliveryResult(device=device, transmitted=False, response=outcome)
        return DeliveryResult(
            device=device,
            transmitted=outcome.ok,
            response=outcome.to_dict(),
            batch_id=outcome.apns_id,
        )
