"""Tests for the standalone HTML report."""

from __future__ import annotations

import pandas as pd
import pytest

from ynab_report.report import REPORT_COLUMNS
from ynab_report.visual_report import build_visual_report_html, with_value_columns

COLORS = {"Essentials": "#dfe7f5", "Fun": "#f4dccb"}


def _report() -> pd.DataFrame:
    rows = [
        ("Essentials", "Groceries", 70.0, -10.0, 60.0, "monthly"),
        ("Essentials", "Rent", 1200.0, 0.0, 1200.0, "annual"),
        ("Fun", "Games", 20.0, -5.0, 15.0, "monthly"),
        ("Savings", "Rainy Day", 100.0, -99.0, 1.0, "monthly"),
    ]
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def _html(report=None, colors=COLORS, show_all_rows=False, **kwargs) -> str:
    return build_visual_report_html(
        _report() if report is None else report,
        colors,
        "Week 11 (Mar 10 - Mar 16)",
        2024,
        show_all_rows,
        **kwargs,
    )


def test_with_value_columns_annualises_monthly_budgets() -> None:
    values = with_value_columns(_report()).set_index("category_name")
    assert values.loc["Groceries", "planned"] == pytest.approx(840.0)
    assert values.loc["Groceries", "per_month"] == pytest.approx(70.0)
    assert values.loc["Rent", "planned"] == pytest.approx(1200.0)
    assert values.loc["Rent", "per_month"] == pytest.approx(100.0)
    assert values.loc["Rent", "remaining"] == pytest.approx(1200.0)
    assert bool(values.loc["Rent", "is_annual"]) is True


def test_page_structure() -> None:
    page = _html()
    assert page.startswith("<!DOCTYPE html>")
    assert page.endswith("</html>\n")
    assert "<h1>Week 11 (Mar 10 - Mar 16)</h1>" in page
    assert "2024 (planned)" in page
    assert "2024 per month" in page


def test_rows_and_totals() -> None:
    page = _html()
    assert "Groceries" in page
    assert "£840.00" in page
    assert "£70.00" in page
    assert "£10.00" in page
    # groups outside the watch list are not shown
    assert "Rainy Day" not in page
    assert "Savings" not in page

    assert "Total Essentials" in page
    assert "Total Fun" in page
    # group totals include categories with no spending
    assert "£2,040.00" in page
    assert 'style="background-color: #bdc4d0;"' in page
    assert "#b7b7b7" in page


def test_zero_spend_rows_follow_show_all_rows() -> None:
    assert "Rent" not in _html(show_all_rows=False)

    page = _html(show_all_rows=True)
    assert "<td>Rent</td>" in page
    # annual goals get darker planned cells
    assert 'class="number" style="background-color: #9ca1ab;">£1,200.00' in page


def test_groups_follow_watch_list_order() -> None:
    page = _html(colors={"Fun": "#f4dccb", "Essentials": "#dfe7f5"})
    assert page.index("Total Fun") < page.index("Total Essentials")

    page = _html()
    assert page.index("Total Essentials") < page.index("Total Fun")


def test_text_is_escaped() -> None:
    report = pd.DataFrame(
        [("Bills & <Stuff>", "Gas <b>", 10.0, -1.0, 9.0, "monthly")],
        columns=REPORT_COLUMNS,
    )
    page = _html(report=report, colors={"Bills & <Stuff>": "#ffffff"})
    assert "Total Bills &amp; &lt;Stuff&gt;" in page
    assert "Gas &lt;b&gt;" in page
    assert "<b>" not in page


def test_no_watched_rows_means_no_totals() -> None:
    page = _html(colors={"Travel": "#000000"})
    assert 'class="total"' not in page
    assert 'class="group"' not in page


def test_chart_is_optional() -> None:
    assert "plotly-graph-div" not in _html()
    page = _html(include_chart=True)
    assert "plotly-graph-div" in page
    assert page.endswith("</html>\n")
