"""Calendar-day key and day counter for the daily quiz.

The day key follows the civil date in a fixed timezone (US Eastern by
default), so 23:30 in New York and 23:30 UTC can land on different keys.
The day index counts calendar days since a fixed epoch, epoch day being 1.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_EPOCH = "20250824"


class DayInfo(NamedTuple):
    day: str
    index: int


def parse_day(day: str) -> date:
    """Parse a ``YYYYMMDD`` key into a date."""
    if len(day) != 8 or not day.isdigit():
        raise ValueError(f"Expected YYYYMMDD day key, got: {day!r}")
    return date(int(day[:4]), int(day[4:6]), int(day[6:8]))


def day_key(now: Optional[datetime] = None, tz: str = DEFAULT_TIMEZONE) -> str:
    """Return the civil date of ``now`` in ``tz`` as ``YYYYMMDD``.

    Naive datetimes are taken to be UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz)).strftime("%Y%m%d")


def day_index(epoch: str, day: str) -> int:
    """Days since ``epoch`` inclusive; never below 1."""
    diff = (parse_day(day) - parse_day(epoch)).days
    return 1 + max(0, diff)


def resolve_day(
    now: Optional[datetime] = None,
    tz: str = DEFAULT_TIMEZONE,
    epoch: str = DEFAULT_EPOCH,
) -> DayInfo:
    day = day_key(now, tz)
    return DayInfo(day=day, index=day_index(epoch, day))
