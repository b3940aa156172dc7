"""Twelve-point monthly series for the cash-flow charts and analytics tables."""
import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from finreport.domain import EXPENSE, INCOME, INVESTMENT, BankAccount, Category, SubCategory, Transaction
from finreport.filters import (
    ALL,
    Selector,
    filter_by_period,
    is_received_income,
    is_settled_expense,
    parse_selector,
    period_label,
)
from finreport.functional import parse_date
from finreport.reports import ZERO, total

MONTH_ABBR = tuple(calendar.month_abbr[1:])


@dataclass(frozen=True)
class RealizedPoint:
    month: int             # 0 = January
    label: str
    received_income: Decimal
    paid_expenses: Decimal
    balance: Decimal


@dataclass(frozen=True)
class ProvisionedPoint:
    month: int
    label: str
    total_income: Decimal
    total_expenses: Decimal


def month_buckets(trans: Iterable[Transaction], year: Selector = ALL) -> tuple[tuple[Transaction, ...], ...]:
    """Split transactions into twelve month-of-year buckets.

    With ``year == "all"`` a bucket gathers that calendar month from every
    year; otherwise only the selected year counts. Unreadable dates are dropped.
    """
    year = parse_selector(year)
    buckets: list[list[Transaction]] = [[] for _ in range(12)]
    for t in trans:
        d = parse_date(t.date).get_or_else(None)
        if d is None or (year != ALL and d.year != year):
            continue
        buckets[d.month - 1].append(t)
    return tuple(tuple(b) for b in buckets)


def realized_series(trans: Iterable[Transaction], year: Selector = ALL) -> tuple[RealizedPoint, ...]:
    points = []
    for i, bucket in enumerate(month_buckets(trans, year)):
        received = total(filter(is_received_income, bucket))
        paid = total(filter(is_settled_expense, bucket))
        points.append(RealizedPoint(i, MONTH_ABBR[i], received, paid, received - paid))
    return tuple(points)


def provisioned_series(trans: Iterable[Transaction], year: Selector = ALL) -> tuple[ProvisionedPoint, ...]:
    points = []
    for i, bucket in enumerate(month_buckets(trans, year)):
        income = total(t for t in bucket if t.type == INCOME)
        expenses = total(t for t in bucket if t.type == EXPENSE)
        points.append(ProvisionedPoint(i, MONTH_ABBR[i], income, expenses))
    return tuple(points)


@dataclass(frozen=True)
class CashFlowSummary:
    label: str
    received_income: Decimal
    paid_expenses: Decimal
    balance: Decimal          # realized: received - paid
    total_income: Decimal
    total_expenses: Decimal


def cash_flow_summary(trans: Iterable[Transaction], year: Selector = ALL, month: Selector = ALL) -> CashFlowSummary:
    selected = filter_by_period(trans, year, month)
    received = total(filter(is_received_income, selected))
    paid = total(filter(is_settled_expense, selected))
    return CashFlowSummary(
        label=period_label(year, month),
        received_income=received,
        paid_expenses=paid,
        balance=received - paid,
        total_income=total(t for t in selected if t.type == INCOME),
        total_expenses=total(t for t in selected if t.type == EXPENSE),
    )


# Axis helpers


def series_max(*columns: Iterable[Decimal], floor: Decimal = Decimal(1)) -> Decimal:
    return max([floor, *(v for col in columns for v in col)])


def abbreviate(value) -> str:
    """Short magnitude label: 950 -> "950", 1234 -> "1.2k", 3400000 -> "3.4Mi"."""
    value = float(value)
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    # promote on the rounded value: 999_999 is "1.0Mi", never "1000.0k"
    if round(magnitude / 1_000, 1) >= 1_000:
        return f"{sign}{magnitude / 1_000_000:.1f}Mi"
    if round(magnitude) >= 1_000:
        return f"{sign}{magnitude / 1_000:.1f}k"
    return f"{sign}{magnitude:.0f}"


def axis_ticks(max_value: Decimal, steps: int = 4) -> tuple[tuple[Decimal, str], ...]:
    """Evenly spaced y-axis ticks from ``max_value`` down to zero."""
    ticks = []
    for i in range(steps + 1):
        value = Decimal(max_value) * (1 - Decimal(i) / steps)
        ticks.append((value, abbreviate(value)))
    return tuple(ticks)


# Per-category / per-bank monthly matrices


@dataclass(frozen=True)
class MatrixRow:
    id: Optional[str]
    name: str
    monthly: tuple[Decimal, ...]
    total: Decimal
    children: tuple['MatrixRow', ...] = ()


def month_keys(year: Selector, today: Optional[date] = None) -> tuple[str, ...]:
    """``YYYY-MM`` keys for the twelve columns; "all" falls back to the current year."""
    year = parse_selector(year)
    if year == ALL:
        year = (today or date.today()).year
    return tuple(f"{year}-{m:02d}" for m in range(1, 13))


def _month_key(t: Transaction) -> Optional[str]:
    d = parse_date(t.date).get_or_else(None)
    return None if d is None else f"{d.year}-{d.month:02d}"


def _matrix_row(row_id, name, trans, keys, pred: Callable[[Transaction], bool], children=()) -> MatrixRow:
    monthly = tuple(total(t for t in trans if pred(t) and _month_key(t) == key) for key in keys)
    return MatrixRow(row_id, name, monthly, sum(monthly, ZERO), tuple(children))


def sort_matrix(rows: Iterable[MatrixRow], sort_by: str = "name", order: Optional[str] = None) -> tuple[MatrixRow, ...]:
    """Sort by "name" (ascending by default) or "total" (descending by default)."""
    if sort_by not in ("name", "total"):
        raise ValueError(f"Unknown matrix sort key: {sort_by!r}")
    if order is None:
        order = "asc" if sort_by == "name" else "desc"
    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {order!r}")
    if sort_by == "name":
        key = lambda r: r.name.casefold()
    else:
        key = lambda r: r.total
    return tuple(sorted(rows, key=key, reverse=order == "desc"))


def category_matrix(
    trans: Iterable[Transaction],
    cats: tuple[Category, ...],
    subs: tuple[SubCategory, ...],
    tx_type: str,
    year: Selector = ALL,
    sort_by: str = "name",
    order: Optional[str] = None,
    today: Optional[date] = None,
) -> tuple[MatrixRow, ...]:
    """Monthly totals per category of ``tx_type``, with sub-category rows."""
    trans = tuple(t for t in trans if t.type == tx_type)
    keys = month_keys(year, today)
    rows = []
    for cat in (c for c in cats if c.type == tx_type):
        children = tuple(
            _matrix_row(
                sub.id, sub.name, trans, keys,
                lambda t, cid=cat.id, sid=sub.id: t.category == cid and t.sub_category == sid,
            )
            for sub in subs
            if sub.parent_id == cat.id
        )
        rows.append(_matrix_row(cat.id, cat.name, trans, keys, lambda t, cid=cat.id: t.category == cid, children))
    return sort_matrix(rows, sort_by, order)


def bank_matrix(
    trans: Iterable[Transaction],
    banks: tuple[BankAccount, ...],
    year: Selector = ALL,
    sort_by: str = "name",
    order: Optional[str] = None,
    today: Optional[date] = None,
) -> tuple[MatrixRow, ...]:
    """Monthly signed investment totals per bank account."""
    trans = tuple(t for t in trans if t.type == INVESTMENT)
    keys = month_keys(year, today)
    rows = [
        _matrix_row(bank.id, bank.bank_name, trans, keys, lambda t, bid=bank.id: t.bank_account == bid)
        for bank in banks
    ]
    return sort_matrix(rows, sort_by, order)


def matrix_totals(rows: Iterable[MatrixRow]) -> tuple[tuple[Decimal, ...], Decimal]:
    rows = tuple(rows)
    monthly = tuple(sum((r.monthly[i] for r in rows), ZERO) for i in range(12))
    return monthly, sum(monthly, ZERO)
