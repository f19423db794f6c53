"""APNs adapter – HTTP/2 transport with provider-token authentication.

Requires ``httpx[http2]`` and ``PyJWT[crypto]``.
"""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Mapping, Sequence

import httpx
import jwt
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from push_dispatch.adapters.apns.config import APNSCredential
from push_dispatch.kernel.errors import (
    PushMisconfiguredError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
)
from push_dispatch.kernel.time import Clock, SystemClock
from push_dispatch.observability.logging import get_logger
from push_dispatch.resilience import DEFAULT_TRANSPORT_ATTEMPTS, TransportRetryPolicy

__all__ = ["APNSResponse", "APNSTransport", "MAX_CONCURRENT_STREAMS", "TOKEN_REFRESH_SECONDS"]

SERVICE = "apns"

# Apple rejects provider tokens older than an hour and throttles refreshes
# more frequent than every twenty minutes.
TOKEN_REFRESH_SECONDS = 50 * 60
MAX_CONCURRENT_STREAMS = 100

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class APNSResponse:
    """APNs answer for a single device token."""

    status: int
    apns_id: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == httpx.codes.OK

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status}
        if self.apns_id is not None:
            body["apns_id"] = self.apns_id
        if self.reason is not None:
            body["reason"] = self.reason
        return body


class APNSTransport:
    """Sends one notification per device token over a shared HTTP/2 connection."""

    def __init__(
        self,
        credential: APNSCredential,
        *,
        clock: Clock | None = None,
        retry_policy: TransportRetryPolicy | None = None,
        max_concurrent_streams: int = MAX_CONCURRENT_STREAMS,
    ) -> None:
        try:
            self._signing_key = load_pem_private_key(credential.key.encode(), password=None)
        except (ValueError, TypeError) as exc:
            raise PushMisconfiguredError("APNs key is not a valid PEM private key", keys=["key"], cause=exc) from exc
        self.credential = credential
        self.app_identifier = credential.topic
        self._clock = clock or SystemClock()
        self._retry_policy = retry_policy or TransportRetryPolicy()
        self._max_concurrent_streams = max_concurrent_streams
        self._provider_token: str | None = None
        self._token_issued_at = 0

    def provider_token(self) -> str:
        """Return the cached ES256 provider token, re-signing it when stale."""
        now = int(self._clock.now().timestamp())
        if self._provider_token is None or now - self._token_issued_at >= TOKEN_REFRESH_SECONDS:
            self._provider_token = jwt.encode(
                {"iss": self.credential.team_id, "iat": now},
                self._signing_key,
                algorithm="ES256",
                headers={"kid": self.credential.key_id},
            )
            self._token_issued_at = now
        return self._provider_token

    def invalidate_token(self) -> None:
        self._provider_token = None

    async def send(
        self,
        payload: Mapping[str, Any],
        headers: Mapping[str, str],
        device_tokens: Sequence[str],
        retries: int = DEFAULT_TRANSPORT_ATTEMPTS,
    ) -> list[APNSResponse | TransportError]:
        """Deliver *payload* to every token; entries align with *device_tokens*.

        A token whose request keeps failing after *retries* attempts gets the
        :class:`TransportError` in its slot instead of a response.
        """
        policy = self._retry_policy.with_attempts(retries)
        streams = asyncio.Semaphore(self._max_concurrent_streams)

        async def deliver(client: httpx.AsyncClient, token: str) -> APNSResponse | TransportError:
            async with streams:
                try:
                    return await policy.execute_async(lambda: self._post(client, payload, headers, token))
                except TransportError as exc:
                    return exc

        async with httpx.AsyncClient(
            base_url=self.credential.base_url, http2=True, timeout=self.credential.timeout
        ) as client:
            return list(await asyncio.gather(*(deliver(client, token) for token in device_tokens)))

    async def _post(
        self,
        client: httpx.AsyncClient,
        payload: Mapping[str, Any],
        headers: Mapping[str, str],
        token: str,
    ) -> APNSResponse:
        request_headers = {**headers, "authorization": f"bearer {self.provider_token()}"}
        try:
            response = await client.post(f"/3/device/{token}", json=payload, headers=request_headers)
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(SERVICE, f"APNs request timed out: {exc}", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise TransportConnectionError(SERVICE, f"APNs request failed: {exc}", cause=exc) from exc

        apns_id = response.headers.get("apns-id")
        if response.status_code >= 500:
            raise TransportError(
                SERVICE, f"HTTP {response.status_code} from APNs", status_code=response.status_code
            )
        if response.status_code == httpx.codes.OK:
            return APNSResponse(status=response.status_code, apns_id=apns_id)

        reason = _reason(response)
        if reason == "ExpiredProviderToken":
            self.invalidate_token()
        logger.debug("apns_rejected", status=response.status_code, reason=reason)
        return APNSResponse(status=response.status_code, apns_id=apns_id, reason=reason)


def _reason(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if not isinstance(body, Mapping):
        return response.text or None
    return body.get("reason")
