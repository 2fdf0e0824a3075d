"""Utility helpers shared by the HTTP layer."""

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Current time as an ISO 8601 string with millisecond precision, e.g. 2024-01-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = ["utc_timestamp"]
