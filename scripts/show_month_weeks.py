#!/usr/bin/env python3
"""Show the reporting weeks of a year, or of one month, as a table."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ynab_report.calendar_weeks import month_weeks, partition_year, week_for_date


def main(year: int, month: Optional[int] = None) -> None:
    segments = month_weeks(year, month) if month else partition_year(year)
    df = pd.DataFrame(
        [
            {
                'Week': s.week_number,
                'Month': s.month,
                'Start': f"{s.week_start:%a %Y-%m-%d}",
                'End': f"{s.week_end:%a %Y-%m-%d}",
                'Days': len(s.dates()),
            }
            for s in segments
        ]
    )
    print(f"{len(df)} segments")
    print(df.to_string(index=False))

    today = date.today()
    if today.year == year and (month is None or today.month == month):
        current = week_for_date(today)
        print(f"\nToday falls in week {current.week_number} ({current.week_start} - {current.week_end})")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show Sunday-anchored reporting weeks.')
    parser.add_argument('year', type=int, help='Calendar year to partition')
    parser.add_argument('--month', type=int, default=None, help='Only show weeks of this month (1-12)')
    args = parser.parse_args()
    main(args.year, month=args.month)
