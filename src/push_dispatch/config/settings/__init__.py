"""Config settings – env-based configuration."""
from push_dispatch.config.settings.base import Settings
from push_dispatch.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from push_dispatch.config.settings.push import PushSettings

__all__ = ["EnvSettingsLoader", "PushSettings", "Settings", "SettingsLoader"]
