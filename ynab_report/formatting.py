"""Formatting utilities for currency, dates and colours in report output."""

from __future__ import annotations

import math
from datetime import date
from typing import Union

from .calendar_weeks import WeekSegment

CURRENCY = "£"


def format_currency(amount: Union[float, int], show_zero: bool = True) -> str:
    """Format an amount with the currency symbol and thousands separators.

    Amounts are rounded to pennies, half away from zero.

    Args:
        amount: The amount to format, in display units
        show_zero: When False, an amount that rounds to zero formats as ""

    Returns:
        Formatted currency string (e.g. "£1,234.57" or "-£25.00")

    Example:
        >>> format_currency(1234567.891)
        '£1,234,567.89'
        >>> format_currency(0.001, show_zero=False)
        ''
    """
    pennies = math.floor(abs(amount) * 100 + 0.5)
    if pennies == 0 and not show_zero:
        return ""
    sign = "-" if amount < 0 and pennies else ""
    return f"{sign}{CURRENCY}{pennies / 100:,.2f}"


def darken_hex(color: str, factor: float) -> str:
    """Scale each channel of a ``#rrggbb`` colour by ``factor``.

    Anything that is not a 7-character hex colour is returned unchanged.

    Example:
        >>> darken_hex("#dfe7f5", 0.85)
        '#bdc4d0'
    """
    if not color.startswith("#") or len(color) != 7:
        return color
    try:
        channels = [int(color[i:i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return color
    return "#" + "".join(f"{int(channel * factor):02x}" for channel in channels)


def format_short_date(day: date) -> str:
    """``Mar 3`` style date without zero padding."""
    return f"{day:%b} {day.day}"


def format_week_heading(week: WeekSegment) -> str:
    return (
        f"Week {week.week_number} of {week.week_start.year}, "
        f"starting on {week.week_start:%A %Y-%m-%d} and ending on {week.week_end:%A %Y-%m-%d}"
    )


def format_week_label(week: WeekSegment) -> str:
    return (
        f"Week {week.week_number} "
        f"({format_short_date(week.week_start)} - {format_short_date(week.week_end)})"
    )
