"""Sunday-anchored reporting weeks clipped to calendar months.

A year is split into 7-day windows that start on a Sunday.  Each window is
numbered from 1 (the window containing January 1st) and then clipped to the
months it touches, so a window that straddles a month boundary produces two
:class:`WeekSegment` records that share the same ``week_number``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List


class WeekNotFoundError(LookupError):
    """Raised when a date cannot be located in its own month's partition."""


@dataclass(frozen=True)
class WeekSegment:
    month: int
    week_start: date
    week_end: date
    week_number: int

    def dates(self) -> List[date]:
        """Every calendar day in the segment, in order."""
        days = (self.week_end - self.week_start).days
        return [self.week_start + timedelta(days=offset) for offset in range(days + 1)]


def previous_sunday(day: date) -> date:
    """Return the Sunday on or before ``day``.

    Raises:
        ValueError: If that Sunday would fall before ``date.min``.
    """
    return date.fromordinal(_sunday_ordinal(day.toordinal()))


def first_day_of_month(year: int, month: int) -> date:
    return date(year, month, 1)


def last_day_of_month(year: int, month: int) -> date:
    if month == 12:
        return date(year, 12, 31)
    return date(year, month + 1, 1) - timedelta(days=1)


def _sunday_ordinal(ordinal: int) -> int:
    # ordinal 1 (0001-01-01) is a Monday, so ordinals divisible by 7 are Sundays
    return ordinal - ordinal % 7


def _months_present(days: List[date]) -> List[int]:
    return sorted({d.month for d in days})


def _clip_to_month(days: List[date], month: int, week_number: int) -> WeekSegment:
    in_month = [d for d in days if d.month == month]
    return WeekSegment(month=month, week_start=in_month[0], week_end=in_month[-1], week_number=week_number)


def partition_year(year: int) -> List[WeekSegment]:
    """Split ``year`` into month-clipped Sunday-Saturday week segments.

    Window arithmetic is done on day ordinals, so the years at either end of
    the ``datetime`` range partition like any other.

    Args:
        year: Calendar year to partition.

    Returns:
        Segments in window order; segments from the same window are ordered
        by ascending month.

    Example:
        >>> partition_year(2024)[0]
        WeekSegment(month=1, week_start=datetime.date(2024, 1, 1), week_end=datetime.date(2024, 1, 6), week_number=1)
    """
    first_day = date(year, 1, 1).toordinal()
    last_day = date(year, 12, 31).toordinal()
    anchor = _sunday_ordinal(first_day)
    num_windows = (_sunday_ordinal(last_day) - anchor) // 7 + 1

    segments: List[WeekSegment] = []
    for offset in range(num_windows):
        window_start = anchor + 7 * offset
        in_year_days = [
            date.fromordinal(ordinal)
            for ordinal in range(max(window_start, first_day), min(window_start + 6, last_day) + 1)
        ]
        for month in _months_present(in_year_days):
            segments.append(_clip_to_month(in_year_days, month, offset + 1))
    return segments


def month_weeks(year: int, month: int) -> List[WeekSegment]:
    """Return the segments of ``year`` that fall in ``month``, in week order."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return [segment for segment in partition_year(year) if segment.month == month]


def week_for_date(day: date) -> WeekSegment:
    """Return the week segment containing ``day``.

    Raises:
        WeekNotFoundError: If no segment of the day's month contains it.  The
            partition covers every day of the year, so this indicates a bug
            in the partitioning rather than bad input.
    """
    for segment in month_weeks(day.year, day.month):
        if segment.week_start <= day <= segment.week_end:
            return segment
    raise WeekNotFoundError(
        f"Date {day.isoformat()} not found in month weeks for {day.year:04d}-{day.month:02d}"
    )
