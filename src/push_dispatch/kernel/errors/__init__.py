"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    PushError
    ├── ConfigError               (configuration.py)
    │   ├── PushMisconfiguredError
    │   ├── MissingRequiredSettingError
    │   └── InvalidSettingValueError
    ├── ClassificationError       (delivery.py)
    └── TransportError            (delivery.py)
        ├── TransportConnectionError
        └── TransportTimeoutError
"""

from push_dispatch.kernel.errors.base import PushError
from push_dispatch.kernel.errors.configuration import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
    PushMisconfiguredError,
)
from push_dispatch.kernel.errors.delivery import (
    ClassificationError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
)

__all__ = [
    "ClassificationError",
    "ConfigError",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PushError",
    "PushMisconfiguredError",
    "TransportConnectionError",
    "TransportError",
    "TransportTimeoutError",
]
