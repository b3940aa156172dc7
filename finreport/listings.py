import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Optional

from finreport.domain import INCOME, BankAccount, Category, SubCategory, Transaction
from finreport.functional import parse_date
from finreport.references import bank_label, category_label, display_title
from finreport.reports import total

SORT_KEYS = ("description", "category", "bank", "date", "amount", "paid")
UNDATED_KEY = ""
UNDATED_LABEL = "No date"


@dataclass(frozen=True)
class MonthGroup:
    month_key: str                  # YYYY-MM, "" for unreadable dates
    label: str                      # e.g. "March 2024"
    transactions: tuple[Transaction, ...]
    count: int
    total: Decimal


def default_order(sort_by: str) -> str:
    return "desc" if sort_by == "date" else "asc"


def _sort_key(
    sort_by: str,
    cats: tuple[Category, ...],
    subs: tuple[SubCategory, ...],
    banks: tuple[BankAccount, ...],
) -> Callable[[Transaction], Any]:
    if sort_by == "description":
        return lambda t: display_title(t, cats, subs).casefold()
    if sort_by == "category":
        return lambda t: str(category_label(cats, t.category)).casefold()
    if sort_by == "bank":
        return lambda t: str(bank_label(banks, t.bank_account, masked=True)).casefold()
    if sort_by == "date":
        return lambda t: parse_date(t.date).get_or_else(date.min)
    if sort_by == "amount":
        return lambda t: t.amount
    return lambda t: int(bool(t.received if t.type == INCOME else t.paid))


def sort_transactions(
    trans: Iterable[Transaction],
    sort_by: str = "date",
    order: Optional[str] = None,
    cats: tuple[Category, ...] = (),
    subs: tuple[SubCategory, ...] = (),
    banks: tuple[BankAccount, ...] = (),
) -> tuple[Transaction, ...]:
    """Return a new, stably sorted tuple; ties keep their input order."""
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by!r}")
    order = order or default_order(sort_by)
    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order: {order!r}")
    return tuple(sorted(trans, key=_sort_key(sort_by, cats, subs, banks), reverse=order == "desc"))


def month_label(month_key: str) -> str:
    if month_key == UNDATED_KEY:
        return UNDATED_LABEL
    year, month = month_key.split("-")
    return f"{calendar.month_name[int(month)]} {year}"


def group_by_month(trans: Iterable[Transaction]) -> tuple[MonthGroup, ...]:
    """Partition transactions by calendar month, most recent month first.

    Order inside each group is the input order. Transactions without a
    readable date form a trailing "No date" group.
    """
    grouped: Dict[str, list[Transaction]] = defaultdict(list)
    for t in trans:
        d = parse_date(t.date).get_or_else(None)
        grouped[UNDATED_KEY if d is None else f"{d.year}-{d.month:02d}"].append(t)

    dated = sorted((k for k in grouped if k != UNDATED_KEY), reverse=True)
    keys = dated + ([UNDATED_KEY] if UNDATED_KEY in grouped else [])
    return tuple(
        MonthGroup(key, month_label(key), tuple(grouped[key]), len(grouped[key]), total(grouped[key]))
        for key in keys
    )


def grouped_listing(
    trans: Iterable[Transaction],
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    cats: tuple[Category, ...] = (),
    subs: tuple[SubCategory, ...] = (),
    banks: tuple[BankAccount, ...] = (),
) -> tuple[MonthGroup, ...]:
    """Group an already filtered list by month, optionally sorting first."""
    if sort_by is not None:
        trans = sort_transactions(trans, sort_by, order, cats, subs, banks)
    return group_by_month(trans)
