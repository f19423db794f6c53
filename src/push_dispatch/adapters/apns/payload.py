"""APNs adapter – notification body and header construction."""
from __future__ import annotations

from typing import Any, Mapping

__all__ = ["apns_headers", "build_apns_payload", "is_background"]

# Job keys that belong in the ``aps`` dictionary; the rest is custom payload.
_APS_KEYS = {
    "alert": "alert",
    "badge": "badge",
    "sound": "sound",
    "category": "category",
    "threadId": "thread-id",
}
_FLAG_KEYS = ("content-available", "mutable-content")


def build_apns_payload(data: Mapping[str, Any] | None) -> dict[str, Any]:
    data = dict(data or {})
    payload: dict[str, Any] = {}
    aps: dict[str, Any] = dict(data.pop("aps", None) or {})
    title = data.pop("title", None)

    for key, value in data.items():
        if key in _APS_KEYS:
            aps[_APS_KEYS[key]] = value
        elif key in _FLAG_KEYS:
            if value in (1, True, "1"):
                aps[key] = 1
        else:
            payload[key] = value

    if title is not None:
        alert = aps.get("alert")
        if isinstance(alert, Mapping):
            aps["alert"] = {**alert, "title": title}
        elif alert is not None:
            aps["alert"] = {"title": title, "body": alert}
        else:
            aps["alert"] = {"title": title}

    payload["aps"] = aps
    return payload


def is_background(payload: Mapping[str, Any]) -> bool:
    """A silent push: ``content-available`` without anything to display."""
    aps = payload.get("aps") or {}
    return bool(aps.get("content-available")) and not any(k in aps for k in ("alert", "badge", "sound"))


def apns_headers(payload: Mapping[str, Any], topic: str, expiration_ms: int | None) -> dict[str, str]:
    background = is_background(payload)
    headers = {
        "apns-topic": topic,
        "apns-push-type": "background" if background else "alert",
        "apns-priority": "5" if background else "10",
    }
    if expiration_ms is not None:
        headers["apns-expiration"] = str(max(0, expiration_ms // 1000))
    return headers
