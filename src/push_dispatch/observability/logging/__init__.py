"""Observability – structlog configuration and helpers."""
from push_dispatch.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from push_dispatch.observability.logging.factory import JsonLoggerFactory
from push_dispatch.observability.logging.processors import get_logger

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "get_logger",
]
