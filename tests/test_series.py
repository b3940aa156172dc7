from datetime import date
from decimal import Decimal

import pytest

from finreport.domain import BankAccount, Category, SubCategory, Transaction
from finreport.series import (
    abbreviate,
    axis_ticks,
    bank_matrix,
    cash_flow_summary,
    category_matrix,
    matrix_totals,
    month_keys,
    provisioned_series,
    realized_series,
    series_max,
    sort_matrix,
)


def make_tx(id, type, amount, date, category="c1", **kw):
    return Transaction(id=id, type=type, amount=Decimal(str(amount)), category=category, date=date, **kw)


def make_sample():
    return (
        make_tx("t1", "income", 100, "2023-01-05", received=True),
        make_tx("t2", "income", 100, "2024-01-07", received=True),
        make_tx("t3", "income", 50, "2024-01-20", received=False),
        make_tx("t4", "expense", 30, "2024-01-11", category="c2", paid=True),
        make_tx("t5", "expense", 20, "2024-01-12", category="c2", paid=False),
        make_tx("t6", "expense", 70, "2024-06-01", category="c3", sub_category="s1", paid=True),
        make_tx("t7", "investment", 500, "2024-01-02", category=None, bank_account="b1"),
    )


def test_cross_year_january_aggregates():
    trans = (
        make_tx("a", "income", 100, "2023-01-10", received=True),
        make_tx("b", "income", 100, "2024-01-10", received=True),
    )
    assert realized_series(trans, "all")[0].received_income == 200
    assert provisioned_series(trans, "all")[0].total_income == 200
    assert provisioned_series(trans, 2024)[0].total_income == 100


def test_realized_series_uses_settlement_flags():
    points = realized_series(make_sample(), 2024)

    assert len(points) == 12
    assert points[0].label == "Jan"
    assert points[0].received_income == 100
    assert points[0].paid_expenses == 30
    assert points[0].balance == 70
    assert points[5].paid_expenses == 70
    assert points[5].balance == -70
    assert all(p.received_income == 0 for p in points[1:5])


def test_provisioned_series_ignores_flags_and_investments():
    points = provisioned_series(make_sample(), "all")
    assert points[0].total_income == 250
    assert points[0].total_expenses == 50
    assert points[11].month == 11


def test_empty_series_is_twelve_zero_points():
    points = realized_series(())
    assert len(points) == 12
    assert all(p.balance == 0 for p in points)


def test_cash_flow_summary():
    summary = cash_flow_summary(make_sample(), 2024, 1)
    assert summary.label == "January 2024"
    assert summary.received_income == 100
    assert summary.paid_expenses == 30
    assert summary.balance == 70
    assert summary.total_income == 150
    assert summary.total_expenses == 50


def test_abbreviate():
    assert abbreviate(0) == "0"
    assert abbreviate(950) == "950"
    assert abbreviate(1234) == "1.2k"
    assert abbreviate(Decimal("3400000")) == "3.4Mi"
    assert abbreviate(-1500) == "-1.5k"


def test_series_max_and_ticks():
    points = realized_series(make_sample(), 2024)
    top = series_max([p.received_income for p in points], [p.paid_expenses for p in points])
    assert top == 100
    assert series_max([]) == 1

    ticks = axis_ticks(Decimal(2000))
    assert [label for _, label in ticks] == ["2.0k", "1.5k", "1.0k", "500", "0"]


def test_month_keys_fall_back_to_current_year():
    assert month_keys(2024)[0] == "2024-01"
    assert month_keys("all", today=date(2026, 5, 1))[11] == "2026-12"


def test_category_matrix_with_subcategories():
    cats = (
        Category("c2", "Rent", "expense"),
        Category("c3", "Food", "expense"),
        Category("c1", "Salary", "income"),
    )
    subs = (SubCategory("s1", "Groceries", "c3", "expense"),)
    rows = category_matrix(make_sample(), cats, subs, "expense", 2024)

    assert [r.name for r in rows] == ["Food", "Rent"]
    food, rent = rows
    assert food.monthly[5] == 70
    assert food.children[0].name == "Groceries"
    assert food.children[0].total == 70
    assert rent.monthly[0] == 50
    assert rent.children == ()

    by_total = category_matrix(make_sample(), cats, subs, "expense", 2024, sort_by="total")
    assert [r.name for r in by_total] == ["Food", "Rent"]
    asc = category_matrix(make_sample(), cats, subs, "expense", 2024, sort_by="total", order="asc")
    assert [r.name for r in asc] == ["Rent", "Food"]

    monthly, grand = matrix_totals(rows)
    assert monthly[0] == 50
    assert grand == 120


def test_bank_matrix():
    banks = (
        BankAccount("b1", "Nubank", "1111", "checking"),
        BankAccount("b2", "Itau", "2222", "investment"),
    )
    rows = bank_matrix(make_sample(), banks, 2024)
    assert [r.name for r in rows] == ["Itau", "Nubank"]
    assert rows[1].monthly[0] == 500
    assert rows[0].total == 0


def test_sort_matrix_rejects_unknown_key():
    with pytest.raises(ValueError):
        sort_matrix((), sort_by="colour")


def test_abbreviate_promotes_on_rounded_value():
    assert abbreviate(999_940) == "999.9k"
    assert abbreviate(999_999) == "1.0Mi"
    assert abbreviate(-999_999) == "-1.0Mi"
    assert abbreviate(999.6) == "1.0k"
    assert abbreviate(999.4) == "999"
