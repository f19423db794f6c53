"""Config settings – PushSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any

from push_dispatch.config.settings.base import Settings
from push_dispatch.kernel.errors import InvalidSettingValueError, MissingRequiredSettingError
from push_dispatch.observability.logging import JsonLoggerFactory

__all__ = ["PushSettings"]

_APNS_FIELDS = ("apns_key", "apns_key_id", "apns_team_id", "apns_topic")


@dataclasses.dataclass
class PushSettings(Settings):
    """Credentials and tuning read from ``PUSH_*`` environment variables.

    A platform is configured when its credential fields are set; APNs needs
    all of key, key id, team id and topic together.
    """

    _prefix = "PUSH"

    gcm_api_key: str | None = None
    gcm_app_identifier: str | None = None
    apns_key: str | None = None
    apns_key_id: str | None = None
    apns_team_id: str | None = None
    apns_topic: str | None = None
    apns_production: bool = False
    timeout_seconds: float = 10.0
    log_level: str = "INFO"

    def _validate(self) -> None:
        if self.timeout_seconds <= 0:
            raise InvalidSettingValueError("PUSH_TIMEOUT_SECONDS", self.timeout_seconds, "must be positive")
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise InvalidSettingValueError("PUSH_LOG_LEVEL", self.log_level, "unknown log level")
        present = [name for name in _APNS_FIELDS if getattr(self, name)]
        if present and len(present) != len(_APNS_FIELDS):
            missing = next(name for name in _APNS_FIELDS if not getattr(self, name))
            raise MissingRequiredSettingError(f"{self._prefix}_{missing}".upper())

    def to_push_config(self) -> dict[str, Any]:
        """Mapping accepted by :class:`~push_dispatch.PushDispatcher`."""
        config: dict[str, Any] = {}
        if self.gcm_api_key:
            gcm: dict[str, Any] = {"apiKey": self.gcm_api_key, "timeout": self.timeout_seconds}
            if self.gcm_app_identifier:
                gcm["appIdentifier"] = self.gcm_app_identifier
            config["android"] = gcm
        if self.apns_key:
            config["ios"] = {
                "token": {"key": self.apns_key, "keyId": self.apns_key_id, "teamId": self.apns_team_id},
                "topic": self.apns_topic,
                "production": self.apns_production,
                "timeout": self.timeout_seconds,
            }
        return config

    def configure_logging(self) -> None:
        """Route structlog JSON output through the root logger at ``log_level``."""
        JsonLoggerFactory.configure(self.log_level)
