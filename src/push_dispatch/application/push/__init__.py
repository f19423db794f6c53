"""Application push – models, batching, classification and the dispatcher."""
from push_dispatch.application.push.batching import split_devices
from push_dispatch.application.push.classify import classify_devices
from push_dispatch.application.push.dispatcher import PushDispatcher
from push_dispatch.application.push.models import DeliveryResult, Device, Platform, PushJob, collapse_devices
from push_dispatch.application.push.ports import Classifier, PlatformSender

__all__ = [
    "Classifier",
    "DeliveryResult",
    "Device",
    "Platform",
    "PlatformSender",
    "PushDispatcher",
    "PushJob",
    "classify_devices",
    "collapse_devices",
    "split_devices",
]
