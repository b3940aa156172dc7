import calendar
import logging
from datetime import date
from typing import Callable, Iterable, Optional, Union

from finreport.domain import EXPENSE, INCOME, Transaction
from finreport.functional import parse_date

logger = logging.getLogger(__name__)

ALL = "all"

Selector = Union[str, int]
Predicate = Callable[[Transaction], bool]


def parse_selector(value: Selector, month: bool = False) -> Selector:
    """Normalise a year/month selector coming from a form or query string.

    Returns ``"all"`` or an int. Months must be within 1..12.
    """
    if isinstance(value, str):
        value = value.strip().lower()
        if value == ALL:
            return ALL
        try:
            value = int(value)
        except ValueError:
            raise ValueError(f"Invalid period selector: {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid period selector: {value!r}")
    if month and not 1 <= value <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {value}")
    return value


def _matches(d: date, year: Selector, month: Selector) -> bool:
    matches_year = year == ALL or d.year == int(year)
    matches_month = month == ALL or d.month == int(month)
    return matches_year and matches_month


def matches_period(t: Transaction, year: Selector, month: Selector) -> bool:
    d = parse_date(t.date).get_or_else(None)
    if d is None:
        logger.debug(f"Excluding transaction {t.id} with unreadable date {t.date!r}")
        return False
    return _matches(d, year, month)


def filter_by_period(
    trans: Iterable[Transaction], year: Selector = ALL, month: Selector = ALL
) -> tuple[Transaction, ...]:
    """Keep the transactions inside the selected period, in input order.

    The year and month axes are independent: ``("all", 3)`` keeps every March
    of every year, ``(2024, "all")`` keeps the whole of 2024.
    """
    year = parse_selector(year)
    month = parse_selector(month, month=True)
    return tuple(t for t in trans if matches_period(t, year, month))


def available_years(trans: Iterable[Transaction]) -> tuple[int, ...]:
    years = {d.year for d in (parse_date(t.date).get_or_else(None) for t in trans) if d is not None}
    return tuple(sorted(years, reverse=True))


def period_key(year: Selector, month: Selector) -> str:
    year = parse_selector(year)
    month = parse_selector(month, month=True)
    if year == ALL and month == ALL:
        return ALL
    if year == ALL:
        return f"all-{month:02d}"
    if month == ALL:
        return f"{year}-all"
    return f"{year}-{month:02d}"


def period_label(year: Selector, month: Selector) -> str:
    year = parse_selector(year)
    month = parse_selector(month, month=True)
    if year == ALL and month == ALL:
        return "All time"
    if year == ALL:
        return f"{calendar.month_name[month]} (all years)"
    if month == ALL:
        return f"Year {year}"
    return f"{calendar.month_name[month]} {year}"


# Composable predicates for detail views


def by_type(tx_type: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def by_category(cat_id: Optional[str]) -> Predicate:
    # None or "" means any category
    def _filter(t: Transaction) -> bool:
        return not cat_id or t.category == cat_id

    return _filter


def by_subcategory(sub_id: Optional[str]) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return not sub_id or t.sub_category == sub_id

    return _filter


def by_bank_account(bank_id: Optional[str]) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return not bank_id or t.bank_account == bank_id

    return _filter


def by_payment_status(status: str = ALL) -> Predicate:
    """status: "all", "paid" or "pending".

    Income counts as paid once received; a missing flag is pending.
    """
    if status not in (ALL, "paid", "pending"):
        raise ValueError(f"Unknown payment status: {status!r}")

    def _filter(t: Transaction) -> bool:
        if status == ALL:
            return True
        settled = bool(t.received) if t.type == INCOME else bool(t.paid)
        return settled if status == "paid" else not settled

    return _filter


def by_period(year: Selector = ALL, month: Selector = ALL) -> Predicate:
    year = parse_selector(year)
    month = parse_selector(month, month=True)

    def _filter(t: Transaction) -> bool:
        return matches_period(t, year, month)

    return _filter


def all_of(*preds: Predicate) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return all(p(t) for p in preds)

    return _filter


def select(trans: Iterable[Transaction], *preds: Predicate) -> tuple[Transaction, ...]:
    return tuple(filter(all_of(*preds), trans))


def is_settled_expense(t: Transaction) -> bool:
    return t.type == EXPENSE and bool(t.paid)


def is_received_income(t: Transaction) -> bool:
    return t.type == INCOME and bool(t.received)
