"""Configuration errors – raised while senders and settings are built."""

from __future__ import annotations

from typing import Any, Iterable

from push_dispatch.kernel.errors.base import PushError


class ConfigError(PushError):
    """Raised when configuration is invalid or loading failed."""

    default_code = "config_error"


class PushMisconfiguredError(ConfigError):
    """The push configuration cannot produce a working dispatcher.

    Covers unsupported platform keys, missing credential fields and
    credential values of the wrong shape.  ``keys`` lists the offending
    configuration keys when they are known.
    """

    default_code = "push_misconfigured"

    def __init__(self, message: str, *, keys: Iterable[str] = (), **kwargs: Any) -> None:
        self.keys: list[str] = list(keys)
        if self.keys:
            kwargs.setdefault("detail", {"keys": self.keys})
        super().__init__(message, **kwargs)


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""

    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but cannot be used."""

    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"Setting '{setting_name}' has invalid value {value!r}: {reason}")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PushMisconfiguredError",
]
