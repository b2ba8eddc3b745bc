"""Command-line entry point: fetch a week of YNAB data and print or save the report."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, TextIO

import pandas as pd

from .config import CSV_PRINT, TABLE_PRINT, Config, ConfigError, load_config
from .formatting import format_week_heading, format_week_label
from .report import BudgetNotFoundError, WeeklyReport, collect_weekly_report, display_rows
from .visual_report import build_visual_report_html
from .ynab import HttpYnabClient, LedgerDataError, YnabApi, YnabApiError

logger = logging.getLogger(__name__)


def totals_path_for(csv_output: Path) -> Path:
    """``report.csv`` -> ``report_category_group_totals.csv`` alongside it."""
    stem = csv_output.stem or "report"
    suffix = csv_output.suffix or ".csv"
    return csv_output.with_name(f"{stem}_category_group_totals{suffix}")


def _print_tables(weekly: WeeklyReport, shown: pd.DataFrame, out: TextIO) -> None:
    with pd.option_context("display.max_rows", None, "display.max_columns", None, "display.width", None):
        print(shown.to_string(index=False), file=out)
        print("Category group totals", file=out)
        print(weekly.totals.to_string(index=False), file=out)


def run(api: YnabApi, cfg: Config, *, today: Optional[date] = None, out: Optional[TextIO] = None) -> WeeklyReport:
    """Build the weekly report and write it in the configured output format.

    ``today`` is used when the config has no ``resolutionDate``; it defaults
    to the current local date.
    """
    out = out or sys.stdout
    resolution_date = cfg.resolution_date or today or date.today()
    weekly = collect_weekly_report(api, cfg.budget_name, cfg.category_group_watch_list, resolution_date)
    shown = display_rows(weekly.report, cfg.show_all_rows)

    print(format_week_heading(weekly.week), file=out)

    output = cfg.output_format
    if output.kind == TABLE_PRINT:
        _print_tables(weekly, shown, out)
    elif output.kind == CSV_PRINT:
        out.write(shown.to_csv(index=False))
        print("category_group_totals", file=out)
        out.write(weekly.totals.to_csv(index=False))
    elif output.kind == "csv_file":
        totals_path = totals_path_for(output.path)
        shown.to_csv(output.path, index=False)
        weekly.totals.to_csv(totals_path, index=False)
        logger.info("Wrote %s and %s", output.path, totals_path)
    elif output.kind == "visual_file":
        page = build_visual_report_html(
            weekly.report,
            cfg.category_group_watch_list,
            format_week_label(weekly.week),
            weekly.week.week_start.year,
            cfg.show_all_rows,
            include_chart=cfg.include_chart,
        )
        output.path.write_text(page, encoding="utf-8")
        logger.info("Wrote %s", output.path)
    else:
        raise ConfigError(f"Unsupported output format '{output.kind}'")
    return weekly


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ynab-report", description="Weekly YNAB spending report.")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to config.json (default: $YNAB_REPORT_CONFIG or ./config.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP requests and pipeline steps")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
        with HttpYnabClient(cfg.personal_access_token) as api:
            run(api, cfg)
    except (FileNotFoundError, ConfigError, BudgetNotFoundError, LedgerDataError, YnabApiError) as exc:
        logger.error("%s", exc)
        return 1
    return 0
