"""APNs adapter – provider-token credential parsing."""
from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any, Mapping

from push_dispatch.kernel.errors import PushMisconfiguredError

APNS_PRODUCTION_URL = "https://api.push.apple.com"
APNS_SANDBOX_URL = "https://api.sandbox.push.apple.com"
DEFAULT_TIMEOUT_SECONDS = 10.0

__all__ = ["APNSCredential", "APNS_PRODUCTION_URL", "APNS_SANDBOX_URL"]

_PEM_PREFIX = "-----BEGIN"


@dataclasses.dataclass(frozen=True)
class APNSCredential:
    """Signing key for provider tokens plus the topic (bundle id) it serves.

    ``key`` holds the PEM content of the ``.p8`` file; a filesystem path is
    read when the credential is parsed.
    """

    key: str = dataclasses.field(repr=False)
    key_id: str
    team_id: str
    topic: str
    production: bool = False
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def base_url(self) -> str:
        return APNS_PRODUCTION_URL if self.production else APNS_SANDBOX_URL

    @classmethod
    def from_config(cls, raw: Any) -> APNSCredential:
        """Parse either a flat mapping or the ``{"token": {...}, "topic": ...}`` shape."""
        if isinstance(raw, APNSCredential):
            return raw
        if not isinstance(raw, Mapping):
            raise PushMisconfiguredError(f"APNs credential must be a mapping, got {type(raw).__name__}")
        token = raw.get("token") if isinstance(raw.get("token"), Mapping) else raw
        fields = {
            "key": token.get("key"),
            "keyId": token.get("keyId") or token.get("key_id"),
            "teamId": token.get("teamId") or token.get("team_id"),
            "topic": raw.get("topic") or raw.get("bundleId") or raw.get("appIdentifier") or raw.get("app_identifier"),
        }
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise PushMisconfiguredError(f"APNs credential is missing {', '.join(missing)}", keys=missing)
        return cls(
            key=_read_key(str(fields["key"])),
            key_id=str(fields["keyId"]),
            team_id=str(fields["teamId"]),
            topic=str(fields["topic"]),
            production=bool(raw.get("production", False)),
            timeout=float(raw.get("timeout") or DEFAULT_TIMEOUT_SECONDS),
        )

    @classmethod
    def parse_many(cls, config: Any) -> list[APNSCredential]:
        if isinstance(config, (list, tuple)):
            if not config:
                raise PushMisconfiguredError("APNs configuration is an empty list")
            return [cls.from_config(item) for item in config]
        if isinstance(config, (Mapping, APNSCredential)):
            return [cls.from_config(config)]
        raise PushMisconfiguredError("APNs configuration is invalid")


def _read_key(value: str) -> str:
    if value.lstrip().startswith(_PEM_PREFIX):
        return value
    try:
        return Path(value).read_text()
    except OSError as exc:
        raise PushMisconfiguredError(f"APNs key file cannot be read: {value}", keys=["key"], cause=exc) from exc
