"""Timestamp formatting shared by handlers."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(dt: datetime | None = None) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T09:30:00.000Z."""
    dt = (dt or utc_now()).astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_to_iso(seconds: int | float | None) -> str | None:
    """Provider epoch seconds -> ISO-8601 string (via a millisecond timestamp)."""
    if seconds is None:
        return None
    millis = seconds * 1000
    return iso_timestamp(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))


def local_display_time(tz_name: str, dt: datetime | None = None) -> str:
    """Human-readable local time for notification bodies (dd/mm/yyyy, HH:MM:SS)."""
    dt = (dt or utc_now()).astimezone(ZoneInfo(tz_name))
    return dt.strftime("%d/%m/%Y, %H:%M:%S")
