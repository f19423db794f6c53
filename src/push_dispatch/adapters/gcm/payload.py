"""GCM adapter – message body construction."""
from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Mapping

# GCM refuses a time_to_live above four weeks.
GCM_TIME_TO_LIVE_MAX = 4 * 7 * 24 * 60 * 60

__all__ = ["GCM_TIME_TO_LIVE_MAX", "build_gcm_payload", "iso_millis", "time_to_live"]


def iso_millis(epoch_ms: int) -> str:
    """Render epoch milliseconds as ``2026-01-01T12:00:00.000Z``."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def time_to_live(sent_at_ms: int, expiration_ms: int) -> int:
    """Seconds left until *expiration_ms*, clamped to ``[0, GCM_TIME_TO_LIVE_MAX]``."""
    seconds = int((expiration_ms - sent_at_ms) // 1000)
    return max(0, min(seconds, GCM_TIME_TO_LIVE_MAX))


def build_gcm_payload(
    data: Mapping[str, Any] | None,
    push_id: str,
    sent_at_ms: int,
    expiration_ms: int | None = None,
) -> dict[str, Any]:
    """Build the GCM message body for one job.

    ``push_id`` is not a GCM field; Android clients use it to discard
    notifications they have already shown.  Without *expiration_ms* the
    ``time_to_live`` key is omitted and GCM applies its own default.
    """
    payload: dict[str, Any] = {
        "priority": "normal",
        "data": {
            "time": iso_millis(sent_at_ms),
            "push_id": push_id,
            "data": json.dumps(data, separators=(",", ":"), default=str),
        },
    }
    if expiration_ms is not None:
        payload["time_to_live"] = time_to_live(sent_at_ms, expiration_ms)
    return payload
