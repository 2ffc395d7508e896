"""
Date projection.

Maps a week number to a calendar date range:

    start = anchor + (week_number - 1) * 7 days
    end   = start + 7 days          (exclusive)

The anchor is the semester start date if known, otherwise January 1 of the
reference year. The reference date is always passed in by the caller;
this module never reads the system clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str]

WEEK = timedelta(days=7)


@dataclass(frozen=True)
class WeekRange:
    start: date
    end: date  # exclusive


def parse_date(value: DateLike) -> date:
    """
    Convert a date, datetime or ISO string ('2025-03-03', '2025-03-03T00:00:00.000Z')
    to a date. Timestamps with an offset are converted to local time first.
    Raises ValueError for unparsable strings.
    """
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) == 10:
        return datetime.strptime(text, "%Y-%m-%d").date()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _local_date(datetime.fromisoformat(text))


def _local_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.date()


def week_date_range(
    week_number: int,
    semester_start: Optional[DateLike] = None,
    *,
    today: Optional[date] = None,
) -> WeekRange:
    """
    Project a week number to its [start, end) date range.

    Week numbers are not checked against any subject range; any integer
    projects to a date. Without a semester start, `today` is required and
    only its year is used.
    """
    if semester_start:
        anchor = parse_date(semester_start)
    else:
        if today is None:
            raise ValueError("today is required when no semester start date is given")
        anchor = date(today.year, 1, 1)

    start = anchor + (week_number - 1) * WEEK
    return WeekRange(start=start, end=start + WEEK)


def format_range(rng: WeekRange) -> str:
    # "Mar 3 - Mar 10, 2025"
    start_s = f"{rng.start.strftime('%b')} {rng.start.day}"
    end_s = f"{rng.end.strftime('%b')} {rng.end.day}, {rng.end.year}"
    return f"{start_s} - {end_s}"


def week_date_string(
    week_number: int,
    semester_start: Optional[DateLike] = None,
    *,
    today: Optional[date] = None,
) -> str:
    """
    Formatted date range for a week, e.g. 'Mar 3 - Mar 10, 2025'.
    """
    return format_range(week_date_range(week_number, semester_start, today=today))
