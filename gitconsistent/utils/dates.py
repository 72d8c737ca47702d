"""Calendar helpers.

Habit logs key on ``YYYY-MM-DD`` strings and weekdays are numbered the
way clients send them in ``targetDays``: 0=Sunday .. 6=Saturday.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterator, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DATE_FMT = "%Y-%m-%d"

SHORT_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_ABBRS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

logger = logging.getLogger(__name__)


def to_date_str(d: date) -> str:
    return d.strftime(DATE_FMT)


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string; raises ValueError on anything else."""
    return datetime.strptime(value, DATE_FMT).date()


def is_date_str(value) -> bool:
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        parse_date(value)
    except ValueError:
        return False
    return True


def today(tz_name: Optional[str] = None) -> date:
    if not tz_name:
        return date.today()
    try:
        return datetime.now(ZoneInfo(tz_name)).date()
    except ZoneInfoNotFoundError:
        logger.warning("Unknown timezone %r; using the server local date", tz_name)
        return date.today()


def weekday_index(d: date) -> int:
    """Sunday-based weekday number (0=Sun .. 6=Sat)."""
    return (d.weekday() + 1) % 7


def end_of_week(d: date) -> date:
    """Saturday closing the Sunday-start week that contains ``d``."""
    return d + timedelta(days=6 - weekday_index(d))


def narrow_weekday(d: date) -> str:
    return SHORT_DAY_NAMES[weekday_index(d)][0]


def day_of_year(d: date) -> int:
    return d.timetuple().tm_yday


def days_between(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)
