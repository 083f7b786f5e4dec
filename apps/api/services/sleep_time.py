"""
Sleep time helpers.

All times are user-local wall-clock "HH:MM" strings (24-hour); there is no
timezone concept. hours_of_sleep() is the single place where a night that
crosses midnight is handled, so every duration goes through it.
"""
import re
from datetime import date, datetime
from typing import Union

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60

DateLike = Union[date, datetime, str]


def is_valid_time(value) -> bool:
    """True for a 24-hour "HH:MM" string such as "07:30" or "23:05"."""
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def time_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Raises:
        ValueError: if the value is not a 24-hour HH:MM string
    """
    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Time must be in HH:MM format: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def hours_of_sleep(bedtime: str, wakeup: str) -> float:
    """
    Hours between bedtime and wake-up.

    If the wake time is not after the bedtime it is taken to be on the next
    calendar day: 23:00 -> 07:00 is 8.0, 01:00 -> 07:00 is 6.0.
    """
    bed = time_to_minutes(bedtime)
    wake = time_to_minutes(wakeup)
    if wake <= bed:
        wake += MINUTES_PER_DAY
    return (wake - bed) / 60


def normalize_date(value: DateLike) -> date:
    """Reduce a date, datetime or ISO string ("2025-02-10T08:00:00Z") to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).split("T")[0])


def days_between(a: DateLike, b: DateLike) -> int:
    """Absolute number of calendar days between two dates."""
    return abs((normalize_date(b) - normalize_date(a)).days)
