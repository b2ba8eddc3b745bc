"""Weekly spending report built from YNAB categories and transactions.

The functions in this module are pure transformations over ledger records
and pandas DataFrames.  They are composed by :func:`collect_weekly_report`,
which fetches the records it needs from a :class:`~ynab_report.ynab.YnabApi`
and returns the report table plus per-group totals for one reporting week.

Money arrives in milliunits and is converted to display units (``/ 1000``)
when the category and transaction frames are built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

import pandas as pd

from .calendar_weeks import WeekSegment, week_for_date
from .ynab import BudgetSummary, Category, CategoryGroup, Transaction, YnabApi

logger = logging.getLogger(__name__)

MILLIUNITS_PER_UNIT = 1000.0
UNCATEGORIZED_GROUP = 'Uncategorized'
TOTAL_LABEL = 'Total'
MONTHLY_CADENCE = 'monthly'
ANNUAL_CADENCE = 'annual'

CATEGORY_COLUMNS = ['group_name', 'category_name', 'budgeted', 'balance', 'cadence_label']
TRANSACTION_COLUMNS = ['date', 'amount', 'payee_name', 'category_name']
REPORT_COLUMNS = ['group_name', 'category_name', 'budgeted', 'spent', 'balance', 'cadence_label']
TOTALS_COLUMNS = ['group_name', 'budgeted', 'spent', 'balance']
NUMERIC_COLUMNS = ['budgeted', 'spent', 'balance']


class BudgetNotFoundError(LookupError):
    """Raised when no budget matches the configured name."""


# ---------------------------------------------------------------------------
# Watch-list resolution
# ---------------------------------------------------------------------------


def get_budget_id(budgets: Sequence[BudgetSummary], budget_name: str) -> Optional[str]:
    """Return the id of the first budget named ``budget_name``."""
    for budget in budgets:
        if budget.name == budget_name:
            return budget.id
    return None


def get_missing_category_groups(groups: Sequence[CategoryGroup], watch_list: Mapping[str, str]) -> Set[str]:
    """Watch-list group names that do not appear in the fetched groups."""
    available = {group.name for group in groups}
    return {name for name in watch_list if name not in available}


def get_categories_to_watch(groups: Sequence[CategoryGroup], watch_list: Mapping[str, str]) -> List[Category]:
    """Visible categories of every watched group, flattened in group order.

    Categories sharing a name across groups are kept as separate entries.
    """
    watched = set(watch_list)
    return [
        category
        for group in groups
        if group.name in watched
        for category in group.categories
        if not category.hidden
    ]


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------


def cadence_label(category: Category) -> str:
    if category.goal_target is not None and category.goal_cadence == 1:
        return MONTHLY_CADENCE
    return ANNUAL_CADENCE


def categories_to_frame(categories: Sequence[Category]) -> pd.DataFrame:
    """Flatten categories into a frame of display-unit amounts."""
    return pd.DataFrame(
        {
            'group_name': pd.Series(
                [c.group_name if c.group_name is not None else UNCATEGORIZED_GROUP for c in categories],
                dtype=object,
            ),
            'category_name': pd.Series([c.name for c in categories], dtype=object),
            'budgeted': pd.Series([c.budgeted / MILLIUNITS_PER_UNIT for c in categories], dtype=float),
            'balance': pd.Series([c.balance / MILLIUNITS_PER_UNIT for c in categories], dtype=float),
            'cadence_label': pd.Series([cadence_label(c) for c in categories], dtype=object),
        },
        columns=CATEGORY_COLUMNS,
    )


def expand_transaction(txn: Transaction) -> List[Dict[str, Any]]:
    """Turn a transaction into one row per categorised line.

    Split transactions yield a row for each subtransaction that has a
    category; the rest are dropped.  A subtransaction without a payee takes
    the parent's.  Unsplit transactions yield a single row when they have a
    category and nothing otherwise.
    """
    if txn.subtransactions:
        return [
            {
                'date': txn.date,
                'amount': sub.amount / MILLIUNITS_PER_UNIT,
                'payee_name': sub.payee_name if sub.payee_name is not None else txn.payee_name,
                'category_name': sub.category_name,
            }
            for sub in txn.subtransactions
            if sub.category_name is not None
        ]
    if txn.category_name is not None:
        return [
            {
                'date': txn.date,
                'amount': txn.amount / MILLIUNITS_PER_UNIT,
                'payee_name': txn.payee_name,
                'category_name': txn.category_name,
            }
        ]
    return []


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for txn in transactions:
        rows.extend(expand_transaction(txn))
    return pd.DataFrame(
        {
            'date': pd.to_datetime(pd.Series([r['date'] for r in rows], dtype=object)),
            'amount': pd.Series([r['amount'] for r in rows], dtype=float),
            'payee_name': pd.Series([r['payee_name'] for r in rows], dtype=object),
            'category_name': pd.Series([r['category_name'] for r in rows], dtype=object),
        },
        columns=TRANSACTION_COLUMNS,
    )


def relevant_transactions(transactions: pd.DataFrame, start_date: date, end_date: date) -> pd.DataFrame:
    """Rows dated within ``start_date..end_date``, both ends inclusive."""
    mask = transactions['date'].between(pd.Timestamp(start_date), pd.Timestamp(end_date), inclusive='both')
    return transactions.loc[mask].reset_index(drop=True)


# ---------------------------------------------------------------------------
# Report tables
# ---------------------------------------------------------------------------


def build_report_table(
    categories: pd.DataFrame,
    transactions: pd.DataFrame,
    category_names: Iterable[str],
) -> pd.DataFrame:
    """Join per-category spending onto the category frame.

    Only transactions whose category is in ``category_names`` count towards
    ``spent``.  Categories without matching transactions report ``0.0``.
    The result is sorted by group then category name.
    """
    watched = transactions[transactions['category_name'].isin(list(set(category_names)))]
    spent = (
        watched.groupby('category_name', sort=False)['amount']
        .sum()
        .rename('spent')
        .reset_index()
    )

    report = categories.merge(spent, on='category_name', how='left')
    report['spent'] = report['spent'].astype(float).fillna(0.0)
    report = report[REPORT_COLUMNS]
    return report.sort_values(['group_name', 'category_name']).reset_index(drop=True)


def build_category_group_totals_table(report: pd.DataFrame) -> pd.DataFrame:
    """Sum the report per group, followed by a ``Total`` row for the whole table."""
    groups = report.groupby('group_name', sort=True)[NUMERIC_COLUMNS].sum().reset_index()
    overall = pd.DataFrame(
        [{'group_name': TOTAL_LABEL, **{col: float(report[col].sum()) for col in NUMERIC_COLUMNS}}],
        columns=TOTALS_COLUMNS,
    )
    if groups.empty:
        return overall
    return pd.concat([groups[TOTALS_COLUMNS], overall], ignore_index=True)


def display_rows(report: pd.DataFrame, show_all_rows: bool) -> pd.DataFrame:
    """Rows to show to the reader; categories without spending are hidden unless asked for."""
    if show_all_rows:
        return report
    return report[report['spent'] != 0.0].reset_index(drop=True)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class WeeklyReport:
    week: WeekSegment
    report: pd.DataFrame
    totals: pd.DataFrame
    missing_groups: Set[str] = field(default_factory=set)

    @property
    def start_date(self) -> date:
        return self.week.week_start

    @property
    def end_date(self) -> date:
        return self.week.week_end


def collect_weekly_report(
    api: YnabApi,
    budget_name: str,
    watch_list: Mapping[str, str],
    resolution_date: date,
) -> WeeklyReport:
    """Fetch ledger data and build the report for the week containing ``resolution_date``.

    Args:
        api: Data source for budgets, categories and transactions.
        budget_name: Name of the YNAB budget to report on.
        watch_list: Category group names to include, mapped to a display hint.
        resolution_date: Any date inside the reporting week.

    Returns:
        The reporting week, the full report table, group totals and the set of
        watch-list groups that were not found in the budget.

    Raises:
        BudgetNotFoundError: If no budget is named ``budget_name``.
    """
    budget_id = get_budget_id(api.get_budgets(), budget_name)
    if budget_id is None:
        raise BudgetNotFoundError(f"no budget found with name {budget_name}")

    category_groups = api.get_category_groups(budget_id)
    missing = get_missing_category_groups(category_groups, watch_list)
    if missing:
        logger.warning(
            "categoryGroupWatchList includes unknown category groups: %s",
            ', '.join(sorted(missing)),
        )
    to_watch = get_categories_to_watch(category_groups, watch_list)

    week = week_for_date(resolution_date)
    logger.debug("Reporting week %s: %s to %s", week.week_number, week.week_start, week.week_end)

    # budgeted and balance are month-specific, so refetch each category for the week's month
    month_categories = [api.get_month_category(budget_id, week.week_start, c.id) for c in to_watch]
    category_frame = categories_to_frame(month_categories)

    transactions = api.get_transactions(budget_id, week.week_start)
    transaction_frame = relevant_transactions(
        transactions_to_frame(transactions), week.week_start, week.week_end
    )
    logger.debug("%d transaction rows fall inside the reporting week", len(transaction_frame))

    report = build_report_table(category_frame, transaction_frame, {c.name for c in month_categories})
    totals = build_category_group_totals_table(report)
    return WeeklyReport(week=week, report=report, totals=totals, missing_groups=missing)
