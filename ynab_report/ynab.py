"""YNAB ledger records and the data source that fetches them.

The report pipeline only needs four read operations from YNAB, captured by
the :class:`YnabApi` protocol.  :class:`HttpYnabClient` talks to the public
REST API; :class:`InMemoryYnabApi` serves fixed records so the pipeline can
be exercised without a network connection.

Money values are kept exactly as YNAB sends them: integers in milliunits
(thousandths of the display currency).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "https://api.ynab.com/v1"
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)


class LedgerDataError(ValueError):
    """Raised when a ledger record from YNAB is missing fields or malformed."""


class YnabApiError(RuntimeError):
    """Raised when a YNAB API request fails."""

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def _required(payload: Mapping[str, Any], key: str, record: str) -> Any:
    if key not in payload or payload[key] is None:
        raise LedgerDataError(f"{record} record is missing required field '{key}'")
    return payload[key]


def _text(payload: Mapping[str, Any], key: str, record: str) -> str:
    value = _required(payload, key, record)
    if not isinstance(value, str):
        raise LedgerDataError(f"{record} field '{key}' must be a string, got {value!r}")
    return value


def _optional_text(payload: Mapping[str, Any], key: str, record: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise LedgerDataError(f"{record} field '{key}' must be a string, got {value!r}")
    return value


def _integer(payload: Mapping[str, Any], key: str, record: str, default: Optional[int] = 0) -> Optional[int]:
    value = payload.get(key)
    if value is None:
        return default
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise LedgerDataError(f"{record} field '{key}' must be an integer, got {value!r}")
    return value


def _flag(payload: Mapping[str, Any], key: str, record: str) -> bool:
    value = payload.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise LedgerDataError(f"{record} field '{key}' must be a boolean, got {value!r}")
    return value


def _iso_date(payload: Mapping[str, Any], key: str, record: str) -> date:
    value = _required(payload, key, record)
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise LedgerDataError(f"{record} field '{key}' is not an ISO date: {value!r}") from exc


def _records(payload: Mapping[str, Any], key: str, record: str) -> List[Mapping[str, Any]]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise LedgerDataError(f"{record} field '{key}' must be a list, got {type(value).__name__}")
    return value


def _label(record: str, payload: Mapping[str, Any], parent: Optional[str] = None) -> str:
    """Name a record for error messages, e.g. ``transaction 't9' (2024-03-12)``."""
    label = record
    ident = payload.get("id")
    if ident is not None:
        label = f"{label} {ident!r}"
    name = payload.get("name")
    if isinstance(name, str):
        label = f"{label} named {name!r}"
    day = payload.get("date")
    if isinstance(day, str):
        label = f"{label} ({day})"
    if parent:
        label = f"{label} of {parent}"
    return label


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetSummary:
    id: str
    name: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BudgetSummary":
        label = _label("budget", payload)
        return cls(id=_text(payload, "id", label), name=_text(payload, "name", label))


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    group_name: Optional[str] = None
    budgeted: int = 0
    balance: int = 0
    goal_cadence: Optional[int] = None
    goal_target: Optional[int] = None
    hidden: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], parent: Optional[str] = None) -> "Category":
        label = _label("category", payload, parent)
        return cls(
            id=_text(payload, "id", label),
            name=_text(payload, "name", label),
            group_name=_optional_text(payload, "category_group_name", label),
            budgeted=_integer(payload, "budgeted", label),
            balance=_integer(payload, "balance", label),
            goal_cadence=_integer(payload, "goal_cadence", label, default=None),
            goal_target=_integer(payload, "goal_target", label, default=None),
            hidden=_flag(payload, "hidden", label),
        )


@dataclass(frozen=True)
class CategoryGroup:
    id: str
    name: str
    hidden: bool = False
    deleted: bool = False
    categories: Tuple[Category, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CategoryGroup":
        label = _label("category group", payload)
        return cls(
            id=_text(payload, "id", label),
            name=_text(payload, "name", label),
            hidden=_flag(payload, "hidden", label),
            deleted=_flag(payload, "deleted", label),
            categories=tuple(
                Category.from_dict(item, parent=label) for item in _records(payload, "categories", label)
            ),
        )


@dataclass(frozen=True)
class SubTransaction:
    amount: int = 0
    payee_name: Optional[str] = None
    category_name: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], parent: Optional[str] = None) -> "SubTransaction":
        label = _label("subtransaction", payload, parent)
        return cls(
            amount=_integer(payload, "amount", label),
            payee_name=_optional_text(payload, "payee_name", label),
            category_name=_optional_text(payload, "category_name", label),
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    amount: int = 0
    payee_name: Optional[str] = None
    category_name: Optional[str] = None
    subtransactions: Tuple[SubTransaction, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Transaction":
        label = _label("transaction", payload)
        return cls(
            id=_text(payload, "id", label),
            date=_iso_date(payload, "date", label),
            amount=_integer(payload, "amount", label),
            payee_name=_optional_text(payload, "payee_name", label),
            category_name=_optional_text(payload, "category_name", label),
            subtransactions=tuple(
                SubTransaction.from_dict(item, parent=label)
                for item in _records(payload, "subtransactions", label)
            ),
        )


# ---------------------------------------------------------------------------
# Data source
# ---------------------------------------------------------------------------


@runtime_checkable
class YnabApi(Protocol):
    """Read operations the report needs from a YNAB budget."""

    def get_budgets(self) -> List[BudgetSummary]:
        ...

    def get_category_groups(self, budget_id: str) -> List[CategoryGroup]:
        ...

    def get_month_category(self, budget_id: str, month: date, category_id: str) -> Category:
        ...

    def get_transactions(self, budget_id: str, since_date: date) -> List[Transaction]:
        ...


class HttpYnabClient:
    """Synchronous client for the YNAB v1 REST API.

    Requests are made one at a time with bearer-token auth.  Failures are
    raised as :class:`YnabApiError`; retrying is left to the caller.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = BASE_URL,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "HttpYnabClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get_data(self, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self._client.get(url, params=params)
        except httpx.RequestError as exc:
            raise YnabApiError(f"GET {url} failed: {exc}", url=url) from exc

        if response.is_error:
            raise YnabApiError(
                f"YNAB API returned {response.status_code} for {url}: {response.text}",
                url=url,
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise YnabApiError(f"parsing response from {url}: {exc}", url=url) from exc
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise YnabApiError(f"response from {url} has no 'data' object", url=url)
        return data

    def get_budgets(self) -> List[BudgetSummary]:
        data = self._get_data("/budgets")
        return [BudgetSummary.from_dict(item) for item in _records(data, "budgets", "budgets response")]

    def get_category_groups(self, budget_id: str) -> List[CategoryGroup]:
        data = self._get_data(f"/budgets/{budget_id}/categories")
        return [
            CategoryGroup.from_dict(item)
            for item in _records(data, "category_groups", "categories response")
        ]

    def get_month_category(self, budget_id: str, month: date, category_id: str) -> Category:
        month_str = month.replace(day=1).isoformat()
        data = self._get_data(f"/budgets/{budget_id}/months/{month_str}/categories/{category_id}")
        payload = data.get("category")
        if not isinstance(payload, dict):
            raise LedgerDataError(f"month category response for {category_id} has no 'category' object")
        return Category.from_dict(payload)

    def get_transactions(self, budget_id: str, since_date: date) -> List[Transaction]:
        data = self._get_data(
            f"/budgets/{budget_id}/transactions",
            params={"since_date": since_date.isoformat()},
        )
        return [
            Transaction.from_dict(item)
            for item in _records(data, "transactions", "transactions response")
        ]


class InMemoryYnabApi:
    """YNAB data source backed by fixed records, for tests and dry runs."""

    def __init__(
        self,
        budgets: Iterable[BudgetSummary] = (),
        category_groups: Iterable[CategoryGroup] = (),
        transactions: Iterable[Transaction] = (),
        month_categories: Optional[Mapping[str, Category]] = None,
    ) -> None:
        self.budgets = list(budgets)
        self.category_groups = list(category_groups)
        self.transactions = list(transactions)
        # month-specific overrides keyed by category id
        self.month_categories = dict(month_categories or {})
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def get_budgets(self) -> List[BudgetSummary]:
        self.calls.append(("get_budgets", ()))
        return list(self.budgets)

    def get_category_groups(self, budget_id: str) -> List[CategoryGroup]:
        self.calls.append(("get_category_groups", (budget_id,)))
        return list(self.category_groups)

    def get_month_category(self, budget_id: str, month: date, category_id: str) -> Category:
        self.calls.append(("get_month_category", (budget_id, month, category_id)))
        if category_id in self.month_categories:
            return self.month_categories[category_id]
        for group in self.category_groups:
            for category in group.categories:
                if category.id == category_id:
                    return category
        raise KeyError(f"Unknown category id '{category_id}'")

    def get_transactions(self, budget_id: str, since_date: date) -> List[Transaction]:
        self.calls.append(("get_transactions", (budget_id, since_date)))
        return [txn for txn in self.transactions if txn.date >= since_date]
