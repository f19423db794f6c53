"""
push_dispatch – multi-platform mobile push delivery.

Import path convention::

    from push_dispatch import PushDispatcher, PushJob, Device
    from push_dispatch.adapters.gcm import GCMSender
    from push_dispatch.config import EnvSettingsLoader, PushSettings
"""

from push_dispatch.application.push import DeliveryResult, Device, Platform, PushDispatcher, PushJob

__version__ = "0.1.0"
__all__ = ["DeliveryResult", "Device", "Platform", "PushDispatcher", "PushJob", "__version__"]
