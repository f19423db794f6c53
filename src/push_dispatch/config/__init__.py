"""Config – 12-factor push settings."""
from push_dispatch.config.settings import EnvSettingsLoader, PushSettings, Settings, SettingsLoader
from push_dispatch.kernel.errors import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PushSettings",
    "Settings",
    "SettingsLoader",
]
