"""GCM adapter – multicast HTTP transport (requires httpx)."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping, Sequence

import httpx

from push_dispatch.adapters.gcm.config import DEFAULT_TIMEOUT_SECONDS, GCM_ENDPOINT, GCMCredential
from push_dispatch.kernel.errors import TransportConnectionError, TransportError, TransportTimeoutError
from push_dispatch.observability.logging import get_logger
from push_dispatch.resilience import DEFAULT_TRANSPORT_ATTEMPTS, TransportRetryPolicy

__all__ = ["GCMResponse", "GCMTransport", "MALFORMED_RESULT_ERROR", "RETRYABLE_RESULT_ERRORS"]

SERVICE = "gcm"

# Per-token errors GCM asks clients to retry with backoff.
RETRYABLE_RESULT_ERRORS = frozenset({"Unavailable", "InternalServerError"})
# Stands in for a result entry that is not an object.
MALFORMED_RESULT_ERROR = "MalformedResult"

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class GCMResponse:
    """A multicast answer, ``results`` aligned with the submitted tokens.

    An entry is ``None`` when GCM never answered for that token.
    """

    multicast_id: int | None
    results: list[dict[str, Any] | None]

    @property
    def success(self) -> int:
        return sum(1 for r in self.results if isinstance(r, Mapping) and not r.get("error"))

    @property
    def failure(self) -> int:
        return len(self.results) - self.success

    @property
    def canonical_ids(self) -> int:
        return sum(1 for r in self.results if isinstance(r, Mapping) and r.get("registration_id"))


class _UnavailableTokens(TransportError):
    """Some tokens came back with a retryable error; only those are resent."""

    def __init__(self, count: int) -> None:
        super().__init__(SERVICE, f"{count} token(s) temporarily unavailable", status_code=503)


class GCMTransport:
    """Sends one message to up to 1000 registration tokens per HTTP request."""

    def __init__(
        self,
        api_key: str,
        *,
        app_identifier: str | None = None,
        endpoint: str = GCM_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_policy: TransportRetryPolicy | None = None,
    ) -> None:
        self.app_identifier = app_identifier
        self._api_key = api_key
        self._endpoint = endpoint
        self._timeout = timeout
        self._retry_policy = retry_policy or TransportRetryPolicy()

    @classmethod
    def from_credential(cls, credential: GCMCredential) -> GCMTransport:
        return cls(
            credential.api_key,
            app_identifier=credential.app_identifier,
            endpoint=credential.endpoint,
            timeout=credential.timeout,
        )

    async def send(
        self,
        payload: Mapping[str, Any],
        registration_tokens: Sequence[str],
        retries: int = DEFAULT_TRANSPORT_ATTEMPTS,
    ) -> GCMResponse:
        """Deliver *payload* to *registration_tokens* within *retries* attempts.

        Whole-request failures are retried while transient and raised as
        :class:`TransportError` once attempts run out.  Tokens answered with
        a retryable per-token error are resent alone; if they are still
        failing when attempts run out their last error entry is kept.
        """
        tokens = list(registration_tokens)
        results: list[dict[str, Any] | None] = [None] * len(tokens)
        pending = list(range(len(tokens)))
        multicast_id: int | None = None

        async def attempt(client: httpx.AsyncClient) -> None:
            nonlocal pending, multicast_id
            body = await self._post(client, payload, [tokens[i] for i in pending])
            if multicast_id is None:
                multicast_id = body.get("multicast_id")
            entries = body.get("results") or []
            retry_next: list[int] = []
            for offset, index in enumerate(pending):
                entry = entries[offset] if offset < len(entries) else None
                if entry is not None and not isinstance(entry, Mapping):
                    entry = {"error": MALFORMED_RESULT_ERROR, "raw": entry}
                results[index] = entry
                if entry is not None and entry.get("error") in RETRYABLE_RESULT_ERRORS:
                    retry_next.append(index)
            pending = retry_next
            if pending:
                raise _UnavailableTokens(len(pending))

        policy = self._retry_policy.with_attempts(retries)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                await policy.execute_async(lambda: attempt(client))
            except TransportError as exc:
                # A failed resend must not discard entries already answered.
                if all(r is None for r in results):
                    raise
                logger.debug("gcm_tokens_still_unavailable", pending=len(pending), error=exc.message)
        return GCMResponse(multicast_id=multicast_id, results=results)

    async def _post(
        self, client: httpx.AsyncClient, payload: Mapping[str, Any], tokens: list[str]
    ) -> dict[str, Any]:
        headers = {"Authorization": f"key={self._api_key}", "Content-Type": "application/json"}
        request_body = {**payload, "registration_ids": tokens}
        try:
            response = await client.post(self._endpoint, json=request_body, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(SERVICE, f"GCM request timed out: {exc}", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise TransportConnectionError(SERVICE, f"GCM request failed: {exc}", cause=exc) from exc

        if response.status_code != httpx.codes.OK:
            raise TransportError(
                SERVICE,
                f"HTTP {response.status_code} from GCM",
                status_code=response.status_code,
                detail={"body": response.text[:500]},
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(
                SERVICE, "GCM returned a non-JSON body", status_code=response.status_code, cause=exc
            ) from exc
        if not isinstance(body, dict) or not isinstance(body.get("results") or [], list):
            raise TransportError(
                SERVICE,
                "GCM returned an unexpected body",
                status_code=response.status_code,
                detail={"body": response.text[:500]},
            )
        return body
