"""GCM adapter – Android platform sender.

Batching rules:

* duplicate tokens collapse to one device (the last one given);
* more than :data:`GCM_REGISTRATION_TOKENS_MAX` devices are split into
  chunks sent concurrently, results concatenated in chunk order;
* each chunk goes out through one transport, picked by the app identifier of
  its first device.
"""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Callable, Mapping, Sequence

from push_dispatch.adapters.gcm.config import GCMCredential
from push_dispatch.adapters.gcm.payload import build_gcm_payload
from push_dispatch.adapters.gcm.transport import GCMResponse, GCMTransport
from push_dispatch.application.push.batching import split_devices
from push_dispatch.application.push.models import DeliveryResult, Device, Platform, PushJob, collapse_devices
from push_dispatch.kernel.errors import TransportError
from push_dispatch.kernel.time import Clock, SystemClock
from push_dispatch.kernel.types import IdGenerator, random_push_id
from push_dispatch.observability.logging import get_logger

__all__ = ["GCMSender", "GCM_REGISTRATION_TOKENS_MAX", "GCM_RETRIES"]

GCM_REGISTRATION_TOKENS_MAX = 1000
GCM_RETRIES = 5

logger = get_logger(__name__)

TransportFactory = Callable[[GCMCredential], Any]


class GCMSender:
    """PlatformSender for Android devices over GCM."""

    platform = Platform.ANDROID

    def __init__(
        self,
        config: Any,
        *,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
        transport_factory: TransportFactory | None = None,
        max_tokens: int = GCM_REGISTRATION_TOKENS_MAX,
    ) -> None:
        credentials = GCMCredential.parse_many(config)
        factory = transport_factory or GCMTransport.from_credential
        self._transports = [factory(credential) for credential in credentials]
        self._clock = clock or SystemClock()
        self._id_generator = id_generator or random_push_id
        self._max_tokens = max_tokens

    @property
    def transports(self) -> list[Any]:
        return list(self._transports)

    async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]:
        # One push id and timestamp for the whole job, whatever the chunking.
        return await self._send(job, devices, self._clock.millis(), self._id_generator())

    async def _send(
        self, job: PushJob, devices: Sequence[Device], sent_at: int, push_id: str
    ) -> list[DeliveryResult]:
        devices_map = collapse_devices(devices)
        if len(devices_map) > self._max_tokens:
            chunks = split_devices(list(devices_map.values()), self._max_tokens)
            logger.debug("gcm_devices_split", devices=len(devices_map), chunks=len(chunks), max_tokens=self._max_tokens)
            chunk_results = await asyncio.gather(
                *(self._send(job, chunk, sent_at, push_id) for chunk in chunks), return_exceptions=True
            )
            for outcome in chunk_results:
                if isinstance(outcome, BaseException):
                    raise outcome
            return [result for results in chunk_results for result in results]
        if not devices_map:
            return []

        payload = build_gcm_payload(job.data, push_id, sent_at, job.expiration_time)
        tokens = list(devices_map)
        transport = self._select_transport(next(iter(devices_map.values())))
        logger.debug("gcm_sending", devices=len(tokens), push_id=push_id)

        try:
            response = await transport.send(payload, tokens, retries=GCM_RETRIES)
        except TransportError as exc:
            logger.error("gcm_send_failed", devices=len(tokens), push_id=push_id, error=exc.to_dict())
            return [
                DeliveryResult(device=self._tag(devices_map[token]), transmitted=False, response=exc)
                for token in tokens
            ]

        logger.debug(
            "gcm_response",
            multicast_id=response.multicast_id,
            success=response.success,
            failure=response.failure,
        )
        return self._pair_results(tokens, devices_map, response)

    def _select_transport(self, first_device: Device) -> Any:
        if first_device.app_identifier:
            for transport in self._transports:
                if transport.app_identifier and transport.app_identifier == first_device.app_identifier:
                    return transport
        return self._transports[0]

    def _pair_results(
        self, tokens: list[str], devices_map: dict[str, Device], response: GCMResponse
    ) -> list[DeliveryResult]:
        results: list[DeliveryResult] = []
        for index, token in enumerate(tokens):
            entry = response.results[index] if index < len(response.results) else None
            results.append(
                DeliveryResult(
                    device=self._tag(devices_map[token]),
                    transmitted=isinstance(entry, Mapping) and not entry.get("error"),
                    response=entry,
                    batch_id=response.multicast_id,
                )
            )
        return results

    def _tag(self, device: Device) -> Device:
        return dataclasses.replace(device, platform=self.platform)
