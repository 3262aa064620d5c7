"""
Calendar-relative reference dates and date/time combination.

Every function takes the request's reference instant explicitly; nothing here
reads the clock. Dates are computed in the timezone carried by `now`.
"""
import re
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Tuple

logger = logging.getLogger(__name__)

# Sunday-first, matching the weekday numbering used throughout (Sunday=0..Saturday=6)
WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DEFAULT_DUE_TIME = "09:00"

DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
TIME_RE = re.compile(r'^(\d{2}):(\d{2})$')


def sunday_weekday(value) -> int:
    """Weekday with Sunday=0 .. Saturday=6."""
    return (value.weekday() + 1) % 7


@dataclass(frozen=True)
class DateReferences:
    today: date
    tomorrow: date
    day_after_tomorrow: date
    this_week_friday: date
    next_week_monday: date
    weekday_name: str


def days_until_this_week_friday(weekday: int) -> int:
    if weekday == 5:
        return 0
    if weekday > 5:
        # Saturday rolls over to next week's Friday
        return 7 - weekday + 5
    return 5 - weekday


def days_until_next_week_monday(weekday: int) -> int:
    # Always strictly in the future, even on a Monday
    return (1 - weekday + 7) % 7 or 7


def resolve_date_references(now: datetime) -> DateReferences:
    """Resolve the example dates the todo prompt embeds for relative expressions."""
    today = now.date()
    weekday = sunday_weekday(today)
    return DateReferences(
        today=today,
        tomorrow=today + timedelta(days=1),
        day_after_tomorrow=today + timedelta(days=2),
        this_week_friday=today + timedelta(days=days_until_this_week_friday(weekday)),
        next_week_monday=today + timedelta(days=days_until_next_week_monday(weekday)),
        weekday_name=WEEKDAY_NAMES[weekday],
    )


def combine_date_and_time(date_str: str, time_str: str, now: datetime) -> datetime:
    """
    Combine YYYY-MM-DD and HH:mm into an aware datetime in `now`'s timezone.

    Never raises: anything that does not parse falls back to today at 09:00.
    """
    try:
        date_match = DATE_RE.match((date_str or "").strip())
        time_match = TIME_RE.match((time_str or "").strip())
        if not date_match or not time_match:
            raise ValueError(f"unparseable date/time: {date_str!r} {time_str!r}")
        year, month, day = (int(part) for part in date_match.groups())
        hours, minutes = (int(part) for part in time_match.groups())
        return datetime(year, month, day, hours, minutes, 0, 0, tzinfo=now.tzinfo)
    except ValueError as e:
        logger.warning(f"Date/time combination failed, falling back to today {DEFAULT_DUE_TIME}: {e}")
        return now.replace(hour=9, minute=0, second=0, microsecond=0)


def split_date_and_time(value: datetime) -> Tuple[str, str]:
    """Inverse of combine_date_and_time."""
    return value.strftime("%Y-%m-%d"), value.strftime("%H:%M")
