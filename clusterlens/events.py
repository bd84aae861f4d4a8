"""Lookup of the most recent event about an object."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from clusterlens.kube import Client

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


def _last_timestamp(event: dict[str, Any]) -> datetime:
    value = event.get("lastTimestamp")
    if not value:
        return _NEVER
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def fetch_latest_event(client: Client, namespace: str, name: str) -> dict[str, Any] | None:
    """Return the event about ``name`` with the latest timestamp, or None."""
    latest = None
    for event in client.list("Event", namespace, field_selector=f"involvedObject.name={name}"):
        if latest is None or _last_timestamp(event) > _last_timestamp(latest):
            latest = event
    return latest