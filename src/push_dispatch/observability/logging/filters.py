"""Observability – SensitiveFieldsFilter."""
from __future__ import annotations

from typing import Any

# Credential material that may end up in log events (configs, request headers).
DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {"api_key", "apikey", "authorization", "key", "private_key", "token", "provider_token"}
)


class SensitiveFieldsFilter:
    """Replace values of sensitive keys with ``[REDACTED]``."""

    REDACTED = "[REDACTED]"

    def __init__(self, sensitive_fields: frozenset[str] | None = None) -> None:
        self._fields = frozenset(f.lower() for f in (sensitive_fields or DEFAULT_SENSITIVE_FIELDS))

    def redact(self, data: dict[str, Any]) -> dict[str, Any]:
        return {k: (self.REDACTED if k.lower() in self._fields else v) for k, v in data.items()}

    def redact_deep(self, data: dict[str, Any]) -> dict[str, Any]:
        """Recursively redact nested dicts and lists of dicts."""
        result: dict[str, Any] = {}
        for k, v in data.items():
            if k.lower() in self._fields:
                result[k] = self.REDACTED
            elif isinstance(v, dict):
                result[k] = self.redact_deep(v)
            elif isinstance(v, list):
                result[k] = [self.redact_deep(i) if isinstance(i, dict) else i for i in v]
            else:
                result[k] = v
        return result

    def __call__(self, logger: Any, method_name: Any, event_dict: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        """structlog processor interface."""
        return self.redact_deep(event_dict)


__all__ = ["DEFAULT_SENSITIVE_FIELDS", "SensitiveFieldsFilter"]
