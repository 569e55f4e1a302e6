import asyncio
from datetime import datetime, timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def run_async(coro):
    """Helper to run a trigger coroutine from sync code (views, listener threads)."""
    return asyncio.run(coro)


def as_str(value) -> str:
    """Normalize a Firestore field to the string the clients expect.

    Missing or falsy values become "", booleans become "true"/"false".
    """
    if not value:
        return ""
    if isinstance(value, bool):
        return "true"
    return str(value)


def parse_timestamp(value):
    """
    Parse a stored timestamp into an aware datetime.

    Accepts datetimes (including Firestore DatetimeWithNanoseconds), objects
    exposing ``timestamp()``, ISO-8601 strings and epoch milliseconds.
    Naive values are interpreted in the current time zone.

    Raises:
        ValueError: if the value cannot be read as a timestamp
    """
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value, timezone.get_current_timezone())
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=dt_timezone.utc)
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=dt_timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        parsed = parse_datetime(text)
        if parsed is None:
            day = parse_date(text)
            if day is None:
                raise ValueError(f"Unparseable timestamp: {value!r}")
            # Date-only strings are UTC midnight
            return datetime(day.year, day.month, day.day, tzinfo=dt_timezone.utc)
        if timezone.is_naive(parsed):
            return timezone.make_aware(parsed, timezone.get_current_timezone())
        return parsed
    raise ValueError(f"Not a timestamp: {value!r}")
