"""Plotly figures for the weekly report.

Functions here accept the tables produced by :mod:`ynab_report.report`
and return ``plotly.graph_objects.Figure`` instances that can be embedded
in the HTML report or shown on their own.
"""

from __future__ import annotations

from typing import Mapping, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .report import TOTAL_LABEL


def create_group_spending_chart(
    totals: pd.DataFrame,
    group_colors: Optional[Mapping[str, str]] = None,
    title: str | None = None,
) -> go.Figure:
    """Generate a bar chart of spending per category group.

    Parameters
    ----------
    totals : pandas.DataFrame
        Group totals table with ``group_name`` and ``spent`` columns.  The
        synthetic ``Total`` row is left out of the chart.
    group_colors : mapping, optional
        Bar colour per group name; groups not listed use Plotly's palette.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bar chart with spending shown as positive amounts.
    """
    groups = totals[totals["group_name"] != TOTAL_LABEL]
    if groups.empty:
        fig = go.Figure()
        fig.update_layout(title="No data to display")
        return fig
    df = pd.DataFrame({"Group": groups["group_name"], "Spent": -groups["spent"]})
    fig = px.bar(
        df,
        x="Group",
        y="Spent",
        color="Group",
        color_discrete_map=dict(group_colors or {}),
    )
    fig.update_layout(
        title=title or "Spending by category group",
        xaxis_title="Category group",
        yaxis_title="Spent",
        showlegend=False,
    )
    return fig
