"""pandas views of the report structures, for tables, charts and CSV export."""
from typing import Iterable

import pandas as pd

from finreport.domain import INCOME, BankAccount, Category, SubCategory
from finreport.listings import MonthGroup
from finreport.references import bank_label, category_label, display_title
from finreport.reports import BreakdownRow, ConsolidatedRow
from finreport.series import MONTH_ABBR, MatrixRow, ProvisionedPoint, RealizedPoint


def series_frame(realized: Iterable[RealizedPoint], provisioned: Iterable[ProvisionedPoint]) -> pd.DataFrame:
    rows = [
        {
            "month": r.label,
            "received_income": float(r.received_income),
            "paid_expenses": float(r.paid_expenses),
            "balance": float(r.balance),
            "total_income": float(p.total_income),
            "total_expenses": float(p.total_expenses),
        }
        for r, p in zip(realized, provisioned)
    ]
    return pd.DataFrame(rows, columns=["month", "received_income", "paid_expenses", "balance", "total_income", "total_expenses"])


def breakdown_frame(rows: Iterable[BreakdownRow]) -> pd.DataFrame:
    data = [
        {"label": str(r.label), "amount": float(r.amount), "percent": float(r.percent_of_total)}
        for r in rows
    ]
    return pd.DataFrame(data, columns=["label", "amount", "percent"])


def consolidated_frame(rows: Iterable[ConsolidatedRow]) -> pd.DataFrame:
    data = {r.name: [float(v) for v in r.monthly] + [float(r.total)] for r in rows}
    return pd.DataFrame.from_dict(data, orient="index", columns=[*MONTH_ABBR, "Total"])


def matrix_frame(rows: Iterable[MatrixRow], include_children: bool = True) -> pd.DataFrame:
    data = []
    for row in rows:
        data.append({"name": row.name, "level": 0, **dict(zip(MONTH_ABBR, map(float, row.monthly))), "Total": float(row.total)})
        if include_children:
            for child in row.children:
                data.append({"name": child.name, "level": 1, **dict(zip(MONTH_ABBR, map(float, child.monthly))), "Total": float(child.total)})
    return pd.DataFrame(data, columns=["name", "level", *MONTH_ABBR, "Total"])


def listing_frame(
    groups: Iterable[MonthGroup],
    cats: tuple[Category, ...] = (),
    subs: tuple[SubCategory, ...] = (),
    banks: tuple[BankAccount, ...] = (),
) -> pd.DataFrame:
    data = []
    for group in groups:
        for t in group.transactions:
            data.append({
                "month": group.label,
                "date": pd.to_datetime(t.date, errors="coerce"),
                "description": display_title(t, cats, subs),
                "category": str(category_label(cats, t.category)) if t.category else "",
                "bank": str(bank_label(banks, t.bank_account)) if t.bank_account else "",
                "amount": float(t.amount),
                "settled": bool(t.received if t.type == INCOME else t.paid),
            })
    return pd.DataFrame(data, columns=["month", "date", "description", "category", "bank", "amount", "settled"])
