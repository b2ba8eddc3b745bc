"""Standalone HTML rendering of the weekly report.

The page is a single table: one block of rows per watched category group
(in watch-list order, coloured with the group's watch-list colour), a total
row per group and a grand total.  Planned amounts are annualised so monthly
and annual goals can be read side by side.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List, Mapping

import numpy as np
import pandas as pd

from .formatting import darken_hex, format_currency
from .report import ANNUAL_CADENCE, build_category_group_totals_table, display_rows

GRAND_TOTAL_COLOR = "#b7b7b7"
GROUP_TOTAL_DARKEN = 0.85
ANNUAL_CELL_DARKEN = 0.7

_STYLE = """\
    :root {
      --grid: #d9d9d9;
      --header-bg: #f7f3e9;
      --text: #1f1f1f;
    }
    body {
      margin: 24px;
      font-family: "Alegreya Sans", "Trebuchet MS", sans-serif;
      color: var(--text);
      background: linear-gradient(180deg, #fbf9f4 0%, #f3efe7 100%);
    }
    h1 {
      font-size: 20px;
      margin: 0 0 16px 0;
      letter-spacing: 0.02em;
      text-transform: uppercase;
    }
    table {
      width: 100%;
      border-collapse: collapse;
      background: #fffefc;
      box-shadow: 0 6px 24px rgba(0, 0, 0, 0.08);
    }
    th, td {
      border: 1px solid var(--grid);
      padding: 6px 8px;
      font-size: 13px;
      vertical-align: middle;
    }
    th {
      background: var(--header-bg);
      text-align: left;
      font-weight: 700;
    }
    td.number {
      text-align: right;
      white-space: nowrap;
    }
    tr.total td {
      font-weight: 700;
      border-top: 2px solid #9a9a9a;
    }
    @media (max-width: 760px) {
      body { margin: 12px; }
      th, td { font-size: 12px; }
    }"""


@dataclass
class _Row:
    category: str
    planned: float
    per_month: float
    spent: float
    remaining: float
    color: str
    is_total: bool = False
    show_period_values: bool = True
    is_annual: bool = False


def with_value_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Add ``planned``, ``per_month``, ``remaining`` and ``is_annual`` columns.

    Annual goals are budgeted for the whole year; anything else is a monthly
    amount and is multiplied by 12 to give the planned yearly figure.
    """
    result = df.copy()
    result["is_annual"] = result["cadence_label"] == ANNUAL_CADENCE
    result["planned"] = np.where(result["is_annual"], result["budgeted"], result["budgeted"] * 12.0)
    result["per_month"] = result["planned"] / 12.0
    result["remaining"] = result["balance"]
    return result


def _row_html(row: _Row) -> str:
    class_name = "total" if row.is_total else "group"
    show_values = row.show_period_values or row.is_total
    annual_style = (
        f' style="background-color: {darken_hex(row.color, ANNUAL_CELL_DARKEN)};"' if row.is_annual else ""
    )
    remaining = "" if row.is_total or not show_values else format_currency(row.remaining, show_values)
    return "\n".join(
        [
            f'      <tr class="{class_name}" style="background-color: {row.color};">',
            f"        <td>{html.escape(row.category)}</td>",
            f'        <td class="number"{annual_style}>{format_currency(row.planned, row.is_total)}</td>',
            f'        <td class="number"{annual_style}>{format_currency(row.per_month, row.is_total)}</td>',
            f'        <td class="number">{format_currency(-row.spent, show_values)}</td>',
            f'        <td class="number">{remaining}</td>',
            "      </tr>",
        ]
    )


def _body_rows(report: pd.DataFrame, group_colors: Mapping[str, str], show_all_rows: bool) -> List[str]:
    visible = display_rows(report, show_all_rows)
    rows: List[str] = []
    grand = dict(planned=0.0, per_month=0.0, spent=0.0, remaining=0.0)

    for group_name, color in group_colors.items():
        group_df = report[report["group_name"] == group_name]
        if group_df.empty:
            continue
        group_values = with_value_columns(group_df)
        shown = with_value_columns(visible[visible["group_name"] == group_name]).sort_values(
            "category_name", kind="mergesort"
        )

        group_sums = {key: float(group_values[key].sum()) for key in grand}
        for key, value in group_sums.items():
            grand[key] += value

        for record in shown.itertuples(index=False):
            rows.append(
                _row_html(
                    _Row(
                        category=str(record.category_name),
                        planned=float(record.planned),
                        per_month=float(record.per_month),
                        spent=float(record.spent),
                        remaining=float(record.remaining),
                        color=color,
                        show_period_values=record.spent != 0.0,
                        is_annual=bool(record.is_annual),
                    )
                )
            )
        rows.append(
            _row_html(
                _Row(
                    category=f"Total {group_name}",
                    color=darken_hex(color, GROUP_TOTAL_DARKEN),
                    is_total=True,
                    **group_sums,
                )
            )
        )

    if rows:
        rows.append(_row_html(_Row(category="Total", color=GRAND_TOTAL_COLOR, is_total=True, **grand)))
    return rows


def build_visual_report_html(
    report: pd.DataFrame,
    group_colors: Mapping[str, str],
    week_label: str,
    planned_year: int,
    show_all_rows: bool,
    include_chart: bool = False,
) -> str:
    """Render the report table as a standalone HTML page.

    Args:
        report: Full report table from :func:`~ynab_report.report.build_report_table`
        group_colors: Watch-list mapping of group name to background colour;
            its order decides the order of the groups on the page
        week_label: Heading for the page and the period columns
        planned_year: Year shown in the planned column headings
        show_all_rows: Also list categories with no spending in the week.
            Group totals always include every category.
        include_chart: Append a Plotly bar chart of spending per group

    Returns:
        The complete HTML document, ending with a newline
    """
    body_rows = "\n".join(_body_rows(report, group_colors, show_all_rows))
    week = html.escape(week_label)

    chart = ""
    if include_chart:
        from .visualization import create_group_spending_chart

        fig = create_group_spending_chart(build_category_group_totals_table(report), group_colors)
        chart = "\n" + fig.to_html(full_html=False, include_plotlyjs="cdn")

    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="utf-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1">',
        "  <title>Budget Visual Report</title>",
        "  <style>",
        _STYLE,
        "  </style>",
        "</head>",
        "<body>",
        f"  <h1>{week}</h1>",
        "  <table>",
        "    <thead>",
        "      <tr>",
        '        <th rowspan="2">Category</th>',
        f'        <th rowspan="2">{planned_year} (planned)</th>',
        f'        <th rowspan="2">{planned_year} per month</th>',
        f'        <th colspan="2">{week}</th>',
        "      </tr>",
        "      <tr>",
        "        <th>Spent</th>",
        "        <th>Remaining in period</th>",
        "      </tr>",
        "    </thead>",
        "    <tbody>",
        body_rows,
        "    </tbody>",
        "  </table>" + chart,
        "</body>",
        "</html>",
    ]
    return "\n".join(lines) + "\n"
