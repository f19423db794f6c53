"""GCM adapter – credential parsing."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from push_dispatch.kernel.errors import PushMisconfiguredError

GCM_ENDPOINT = "https://fcm.googleapis.com/fcm/send"
DEFAULT_TIMEOUT_SECONDS = 10.0

__all__ = ["DEFAULT_TIMEOUT_SECONDS", "GCM_ENDPOINT", "GCMCredential"]


@dataclasses.dataclass(frozen=True)
class GCMCredential:
    """One sender identity: a server API key plus an optional app identifier tag."""

    api_key: str = dataclasses.field(repr=False)
    app_identifier: str | None = None
    endpoint: str = GCM_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_config(cls, raw: Any) -> GCMCredential:
        if isinstance(raw, GCMCredential):
            return raw
        if not isinstance(raw, Mapping):
            raise PushMisconfiguredError(f"GCM credential must be a mapping, got {type(raw).__name__}")
        api_key = raw.get("apiKey") or raw.get("api_key")
        if not api_key:
            raise PushMisconfiguredError(
                f"apiKey is missing for GCM credential with keys {sorted(raw)}",
                keys=["apiKey"],
            )
        return cls(
            api_key=str(api_key),
            app_identifier=raw.get("appIdentifier") or raw.get("app_identifier"),
            endpoint=raw.get("endpoint") or GCM_ENDPOINT,
            timeout=float(raw.get("timeout") or DEFAULT_TIMEOUT_SECONDS),
        )

    @classmethod
    def parse_many(cls, config: Any) -> list[GCMCredential]:
        """Accept one credential or a list of them (several sender ids per app)."""
        if isinstance(config, (list, tuple)):
            if not config:
                raise PushMisconfiguredError("GCM configuration is an empty list")
            return [cls.from_config(item) for item in config]
        if isinstance(config, (Mapping, GCMCredential)):
            return [cls.from_config(config)]
        raise PushMisconfiguredError("GCM configuration is invalid")
