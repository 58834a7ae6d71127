from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable

from smartstock.domain.errors import ValidationError

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


def iso_instant(dt: datetime) -> str:
    """UTC instant with millisecond precision, e.g. 2024-05-01T09:30:00.000Z."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_date(value: date | datetime | str) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value).strip()).isoformat()


def resolve_date(value: date | str | None, clock: Clock) -> str:
    """Calendar date for a transaction; defaults to today on ``clock``."""
    if value is None:
        return clock().date().isoformat()
    try:
        return iso_date(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid date '{value}'. Expected YYYY-MM-DD.") from exc
