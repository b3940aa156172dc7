"""Single-period report builder.

Everything here is a pure function over already-loaded collections; inputs
are never mutated and every call returns fresh structures.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Iterable, Mapping, Optional

from finreport.domain import EXPENSE, INCOME, INVESTMENT, BankAccount, Category, Transaction
from finreport.filters import ALL, Selector, filter_by_period, parse_selector, period_key
from finreport.functional import parse_date
from finreport.references import Label, bank_label, category_label

ZERO = Decimal(0)
HUNDRED = Decimal(100)


@dataclass(frozen=True)
class MonthlyReport:
    period: str
    total_income: Decimal = ZERO
    total_received_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_unpaid_expenses: Decimal = ZERO
    total_investments: Decimal = ZERO
    balance: Decimal = ZERO            # income - expenses
    final_balance: Decimal = ZERO      # income - expenses - investments
    income_by_category: Dict[Optional[str], Decimal] = field(default_factory=dict)
    expenses_by_category: Dict[Optional[str], Decimal] = field(default_factory=dict)
    investments_by_bank: Dict[Optional[str], Decimal] = field(default_factory=dict)


def total(trans: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in trans), ZERO)


def share(part: Decimal, whole: Decimal) -> Decimal:
    """Percentage of ``part`` in ``whole``; 0 when ``whole`` is zero."""
    if not whole:
        return ZERO
    return part / whole * HUNDRED


def _accumulate(trans: Iterable[Transaction], key: Callable[[Transaction], Optional[str]]) -> Dict[Optional[str], Decimal]:
    totals: Dict[Optional[str], Decimal] = defaultdict(lambda: ZERO)
    for t in trans:
        totals[key(t)] += t.amount
    return dict(totals)


def build_report(trans: Iterable[Transaction], period: str = ALL) -> MonthlyReport:
    """Reduce an already filtered transaction set into a MonthlyReport."""
    trans = tuple(trans)
    income = [t for t in trans if t.type == INCOME]
    expenses = [t for t in trans if t.type == EXPENSE]
    investments = [t for t in trans if t.type == INVESTMENT]

    total_income = total(income)
    total_expenses = total(expenses)
    total_investments = total(investments)

    return MonthlyReport(
        period=period,
        total_income=total_income,
        total_received_income=total(t for t in income if t.received),
        total_expenses=total_expenses,
        total_unpaid_expenses=total(t for t in expenses if not t.paid),
        total_investments=total_investments,
        balance=total_income - total_expenses,
        final_balance=total_income - total_expenses - total_investments,
        income_by_category=_accumulate(income, lambda t: t.category),
        expenses_by_category=_accumulate(expenses, lambda t: t.category),
        investments_by_bank=_accumulate(investments, lambda t: t.bank_account),
    )


def build_monthly_report(
    trans: Iterable[Transaction], year: Selector = ALL, month: Selector = ALL
) -> MonthlyReport:
    return build_report(filter_by_period(trans, year, month), period_key(year, month))


@dataclass(frozen=True)
class BreakdownRow:
    key: Optional[str]
    label: Label
    amount: Decimal
    percent_of_total: Decimal
    percent_of_max: Decimal    # bar width relative to the largest row


def breakdown_rows(
    amounts: Mapping[Optional[str], Decimal], resolve: Callable[[Optional[str]], Label]
) -> tuple[BreakdownRow, ...]:
    """Chart-ready rows for a breakdown mapping, largest magnitude first.

    Investment breakdowns are signed, so both percentages are taken over
    magnitudes and stay within 0..100; the sign is kept on ``amount``.
    """
    magnitudes = [abs(v) for v in amounts.values()]
    whole = sum(magnitudes, ZERO)
    largest = max(magnitudes, default=ZERO)
    ordered = sorted(amounts.items(), key=lambda item: abs(item[1]), reverse=True)
    return tuple(
        BreakdownRow(
            key=key,
            label=resolve(key),
            amount=amount,
            percent_of_total=share(abs(amount), whole),
            percent_of_max=share(abs(amount), largest),
        )
        for key, amount in ordered
    )


def category_rows(amounts: Mapping[Optional[str], Decimal], cats: tuple[Category, ...]) -> tuple[BreakdownRow, ...]:
    return breakdown_rows(amounts, lambda key: category_label(cats, key))


def bank_rows(amounts: Mapping[Optional[str], Decimal], banks: tuple[BankAccount, ...]) -> tuple[BreakdownRow, ...]:
    return breakdown_rows(amounts, lambda key: bank_label(banks, key))


@dataclass(frozen=True)
class ConsolidatedRow:
    name: str
    monthly: tuple[Decimal, ...]   # Jan..Dec
    total: Decimal


CONSOLIDATED_FIELDS = ("total_income", "total_expenses", "total_investments", "balance", "final_balance")
CONSOLIDATED_NAMES = {
    "total_income": "Income",
    "total_expenses": "Expenses",
    "total_investments": "Investments",
    "balance": "Balance",
    "final_balance": "Final balance",
}


def consolidated_table(trans: Iterable[Transaction], year: Selector = ALL) -> tuple[ConsolidatedRow, ...]:
    """Twelve monthly reports for ``year`` laid out as one row per figure."""
    monthly_reports = reports_by_month(trans, year)
    rows = []
    for name in CONSOLIDATED_FIELDS:
        values = tuple(getattr(r, name) for r in monthly_reports)
        rows.append(ConsolidatedRow(CONSOLIDATED_NAMES[name], values, sum(values, ZERO)))
    return tuple(rows)


@dataclass(frozen=True)
class BankSummary:
    bank_id: Optional[str]
    label: Label
    entries: Decimal
    withdrawals: Decimal
    net: Decimal


@dataclass(frozen=True)
class InvestmentStatement:
    entries: Decimal
    withdrawals: Decimal
    net: Decimal
    banks: tuple[BankSummary, ...]


def _flows(trans: list[Transaction]) -> tuple[Decimal, Decimal, Decimal]:
    entries = total(t for t in trans if t.amount > 0)
    withdrawals = abs(total(t for t in trans if t.amount < 0))
    return entries, withdrawals, total(trans)


def investment_statement(trans: Iterable[Transaction], banks: tuple[BankAccount, ...]) -> InvestmentStatement:
    investments = [t for t in trans if t.type == INVESTMENT]
    by_bank: Dict[Optional[str], list[Transaction]] = defaultdict(list)
    for t in investments:
        by_bank[t.bank_account].append(t)

    summaries = []
    for bank_id, bank_trans in by_bank.items():
        entries, withdrawals, net = _flows(bank_trans)
        if net == 0 and entries == 0 and withdrawals == 0:
            continue
        summaries.append(BankSummary(bank_id, bank_label(banks, bank_id, masked=True), entries, withdrawals, net))
    summaries.sort(key=lambda s: abs(s.net), reverse=True)

    entries, withdrawals, net = _flows(investments)
    return InvestmentStatement(entries, withdrawals, net, tuple(summaries))


def _date_or_max(t: Transaction) -> date:
    return parse_date(t.date).get_or_else(date.max)


def _date_or_min(t: Transaction) -> date:
    return parse_date(t.date).get_or_else(date.min)


def unpaid_expenses(trans: Iterable[Transaction], limit: Optional[int] = None) -> tuple[Transaction, ...]:
    """Expenses not yet paid, oldest first."""
    pending = sorted((t for t in trans if t.type == EXPENSE and not t.paid), key=_date_or_max)
    return tuple(pending if limit is None else pending[: max(0, limit)])


def recent_transactions(trans: Iterable[Transaction], limit: Optional[int] = None) -> tuple[Transaction, ...]:
    newest = sorted(trans, key=_date_or_min, reverse=True)
    return tuple(newest if limit is None else newest[: max(0, limit)])


def reports_by_month(trans: Iterable[Transaction], year: Selector) -> tuple[MonthlyReport, ...]:
    year = parse_selector(year)
    trans = tuple(trans)
    return tuple(build_monthly_report(trans, year, m) for m in range(1, 13))
