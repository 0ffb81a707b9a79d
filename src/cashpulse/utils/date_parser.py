"""Date parsing utilities."""

import re
from datetime import date, datetime, time, timedelta
from typing import Optional
from dateutil import parser as date_parser

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_DAYS_AGO = re.compile(r"^(\d+) days? ago$")
_LAST_WEEKDAY = re.compile(rf"^last ({'|'.join(WEEKDAYS)})$")


def _previous_weekday(today: date, weekday: int) -> date:
    """Most recent ``weekday`` strictly before ``today``."""
    days_back = (today.weekday() - weekday) % 7 or 7
    return today - timedelta(days=days_back)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Accepts anything dateutil understands ("2024-01-15", "January 15, 2024")
    plus "today", "yesterday", "N days ago" and "last <weekday>".

    Args:
        date_str: Date string
        today: Reference day for relative dates, defaults to date.today()

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)

    match = _DAYS_AGO.match(text)
    if match:
        return today - timedelta(days=int(match.group(1)))

    match = _LAST_WEEKDAY.match(text)
    if match:
        return _previous_weekday(today, WEEKDAYS.index(match.group(1)))

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_timestamp(value: str, now: Optional[datetime] = None) -> datetime:
    """Parse a timestamp for a new transaction.

    A bare or relative date keeps the time of day of ``now``, so a
    transaction entered as "yesterday" lands at the same clock time one day
    earlier. A value that carries its own time ("2024-01-15 18:30") is used
    as given.

    Args:
        value: Date or date-time string
        now: Reference instant, defaults to datetime.now()

    Returns:
        Naive local datetime

    Raises:
        ValueError: If the value cannot be parsed
    """
    if now is None:
        now = datetime.now()

    text = value.strip()
    try:
        day = parse_date(text, today=now.date())
    except ValueError:
        day = None

    if day is not None and not _has_time(text):
        return datetime.combine(day, now.time())

    try:
        parsed = date_parser.parse(text, default=datetime.combine(now.date(), time.min))
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse timestamp '{value}': {e}")
    return parsed.replace(tzinfo=None)


def _has_time(text: str) -> bool:
    return ":" in text
