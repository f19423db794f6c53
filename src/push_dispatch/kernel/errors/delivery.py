"""Delivery errors – classification and provider transport failures."""

from __future__ import annotations

from typing import Any

from push_dispatch.kernel.errors.base import PushError


class ClassificationError(PushError):
    """Devices could not be partitioned by platform; the whole send fails."""

    default_code = "classification_failed"


class TransportError(PushError):
    """A provider call failed as a whole.

    Senders never let this escape ``send``: it is attached as the
    ``response`` of every result in the affected batch.
    """

    default_code = "transport_error"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Push provider '{service}' error", **kwargs)
        self.service = service
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        """Whether a later attempt may succeed (5xx responses)."""
        return self.status_code is not None and self.status_code >= 500

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["service"] = self.service
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        return payload


class TransportConnectionError(TransportError):
    """The provider could not be reached."""

    default_code = "transport_connection_error"

    @property
    def transient(self) -> bool:
        return True


class TransportTimeoutError(TransportError):
    """The provider did not answer within the HTTP timeout."""

    default_code = "transport_timeout"

    @property
    def transient(self) -> bool:
        return True


__all__ = [
    "ClassificationError",
    "TransportConnectionError",
    "TransportError",
    "TransportTimeoutError",
]
