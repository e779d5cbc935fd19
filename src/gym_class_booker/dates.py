"""Utilities for working out which class occurrence to book."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser

ONE_WEEK_LATER = "one week later"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def resolve_class_date(value: str, today: Optional[date] = None) -> date:
    """
    Turn the configured class date into a calendar date.

    ``value`` is either a ``yyyy-mm-dd`` date or the special value
    ``"one week later"``, which is seven days after ``today``. Anything else
    raises the ``ValueError`` from :meth:`date.fromisoformat`.
    """
    if value == ONE_WEEK_LATER:
        today = today or date.today()
        return today + timedelta(days=7)
    return date.fromisoformat(value)


def resolve_start_time(class_date: str, class_time: str, *, today: Optional[date] = None) -> str:
    """Start time formatted the way the site lists classes (``yyyy-mm-ddTHH:MM:00``)."""
    target = resolve_class_date(class_date, today)
    return f"{target:%Y-%m-%d}T{class_time}:00"


def normalise_timestamp(value: str) -> str:
    """Reformat a timestamp so that site and local values can be compared as strings."""
    parsed: datetime = date_parser.isoparse(value.strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed.strftime(TIMESTAMP_FORMAT)


def same_start_time(left: str, right: str) -> bool:
    """True when both timestamps describe the same local start time."""
    try:
        return normalise_timestamp(left) == normalise_timestamp(right)
    except (ValueError, OverflowError):
        return False
