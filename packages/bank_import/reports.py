"""Aggregations over a transaction collection.

These feed summaries and dashboards; nothing here renders output. Amounts
follow the collection's sign convention: expenses are negative in
:class:`Totals` and reported as positive magnitudes in the per-group views.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .categorize import OTHER
from .models import Transaction
from .normalizers import is_iso_date, to_iso_date

UNKNOWN_MONTH: str = "Unknown"


def extract_month(value: str) -> str:
    """``YYYY-MM`` for ISO or ``D.M.YYYY`` dates, else the first 7 characters."""

    if not value:
        return ""
    s = value.strip()
    if is_iso_date(s) or (len(s) >= 7 and s[:4].isdigit() and s[4] == "-"):
        return s[:7]
    iso = to_iso_date(s)
    if iso:
        return iso[:7]
    return s[:7]


def available_months(transactions: Iterable[Transaction]) -> list[str]:
    months = {m for m in (extract_month(tx.booking_date) for tx in transactions) if m}
    return sorted(months, reverse=True)


def filter_by_month(transactions: Iterable[Transaction], month: str | None) -> list[Transaction]:
    if not month:
        return list(transactions)
    return [tx for tx in transactions if extract_month(tx.booking_date) == month]


# ---- Totals ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Totals:
    income: float
    expense: float

    @property
    def balance(self) -> float:
        return self.income + self.expense


def totals(transactions: Iterable[Transaction]) -> Totals:
    income = 0.0
    expense = 0.0
    for tx in transactions:
        if tx.amount >= 0:
            income += tx.amount
        else:
            expense += tx.amount
    return Totals(income=income, expense=expense)


@dataclass(frozen=True, slots=True)
class GroupTotal:
    label: str
    income: float
    expense: float

    @property
    def net(self) -> float:
        return self.income - self.expense


def _split(
    transactions: Iterable[Transaction], key_of: Callable[[Transaction], str]
) -> dict[str, list[float]]:
    acc: dict[str, list[float]] = {}
    for tx in transactions:
        entry = acc.setdefault(key_of(tx), [0.0, 0.0])
        if tx.amount >= 0:
            entry[0] += tx.amount
        else:
            entry[1] += abs(tx.amount)
    return acc


def category_totals(transactions: Iterable[Transaction]) -> list[GroupTotal]:
    """Per effective category; biggest spend first, then income, then name."""

    acc = _split(transactions, lambda tx: tx.category or OTHER)
    rows = [GroupTotal(label=k, income=v[0], expense=v[1]) for k, v in acc.items()]
    rows.sort(key=lambda r: r.label)
    rows.sort(key=lambda r: (r.expense, r.income), reverse=True)
    return rows


def monthly_breakdown(transactions: Iterable[Transaction]) -> list[GroupTotal]:
    acc = _split(transactions, lambda tx: extract_month(tx.booking_date) or UNKNOWN_MONTH)
    rows = [GroupTotal(label=k, income=v[0], expense=v[1]) for k, v in acc.items()]
    return sorted(rows, key=lambda r: r.label, reverse=True)


# ---- Payees ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PayeeTotal:
    label: str
    total: float
    count: int
    months: int
    categories: tuple[str, ...]

    @property
    def average(self) -> float:
        return self.total / self.count if self.count else 0.0


def _payee_groups(transactions: Iterable[Transaction]) -> list[PayeeTotal]:
    groups: dict[str, dict[str, Any]] = {}
    for tx in transactions:
        if tx.amount >= 0:
            continue
        label = tx.payee or tx.description
        if not label:
            continue
        entry = groups.setdefault(
            label.lower(),
            {"label": label, "total": 0.0, "count": 0, "months": set(), "categories": set()},
        )
        entry["total"] += abs(tx.amount)
        entry["count"] += 1
        entry["months"].add(extract_month(tx.booking_date) or tx.booking_date[:7])
        entry["categories"].add(tx.category or OTHER)
    return [
        PayeeTotal(
            label=g["label"],
            total=g["total"],
            count=g["count"],
            months=len(g["months"]),
            categories=tuple(sorted(g["categories"])),
        )
        for g in groups.values()
    ]


def payee_totals(transactions: Iterable[Transaction], *, limit: int | None = 5) -> list[PayeeTotal]:
    """Expense totals per payee (falling back to the description)."""

    rows = sorted(_payee_groups(transactions), key=lambda p: p.total, reverse=True)
    return rows if limit is None else rows[:limit]


def recurring_expenses(
    transactions: Iterable[Transaction], *, limit: int = 5, min_occurrences: int = 3
) -> list[PayeeTotal]:
    """Payees charged at least ``min_occurrences`` times or across as many months."""

    rows = [
        p
        for p in _payee_groups(transactions)
        if p.count >= min_occurrences or p.months >= min_occurrences
    ]
    rows.sort(key=lambda p: p.total, reverse=True)
    return rows[:limit]


def largest_expenses(transactions: Iterable[Transaction], *, limit: int = 5) -> list[Transaction]:
    return sorted((tx for tx in transactions if tx.amount < 0), key=lambda tx: tx.amount)[:limit]


# ---- Bundle ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Summary:
    month: str | None
    count: int
    totals: Totals
    categories: list[GroupTotal] = field(default_factory=list)
    months: list[GroupTotal] = field(default_factory=list)
    top_payees: list[PayeeTotal] = field(default_factory=list)
    recurring: list[PayeeTotal] = field(default_factory=list)
    largest: list[Transaction] = field(default_factory=list)


def summarize(transactions: Sequence[Transaction], *, month: str | None = None) -> Summary:
    selected = filter_by_month(transactions, month)
    return Summary(
        month=month or None,
        count=len(selected),
        totals=totals(selected),
        categories=category_totals(selected),
        months=monthly_breakdown(selected),
        top_payees=payee_totals(selected),
        recurring=recurring_expenses(selected),
        largest=largest_expenses(selected),
    )


__all__ = [
    "GroupTotal",
    "PayeeTotal",
    "Summary",
    "Totals",
    "UNKNOWN_MONTH",
    "available_months",
    "category_totals",
    "extract_month",
    "filter_by_month",
    "largest_expenses",
    "monthly_breakdown",
    "payee_totals",
    "recurring_expenses",
    "summarize",
    "totals",
]
