from datetime import date, datetime
from decimal import Decimal

import pytest

from finreport.domain import BankAccount, Category, SubCategory, Transaction
from finreport.functional import (
    Either, Left, Maybe, Nothing, Right, Some,
    parse_date, safe_bank_account, safe_category, signed_investment_amount, validate_transaction,
)


def make_refs():
    cats = (
        Category("cat1", "Food", "expense"),
        Category("cat2", "Salary", "income"),
    )
    subs = (
        SubCategory("sub1", "Groceries", "cat1", "expense"),
        SubCategory("sub2", "Bonus", "cat2", "income"),
    )
    banks = (BankAccount("b1", "Nubank", "12345678", "investment"),)
    return cats, subs, banks


def make_tx(**kw):
    fields = dict(id="t1", type="expense", amount=Decimal(100), category="cat1", date="2025-01-01")
    fields.update(kw)
    return Transaction(**fields)


def test_maybe_map():
    maybe_value = Some(5)
    doubled = maybe_value.map(lambda x: x * 2)

    assert doubled.is_some()
    assert doubled.get_or_else(0) == 10

    nothing = Nothing()
    mapped_nothing = nothing.map(lambda x: x * 2)
    assert mapped_nothing.is_none()
    assert mapped_nothing.get_or_else(0) == 0


def test_maybe_bind():
    def safe_divide(x: int) -> Maybe[int]:
        if x == 0:
            return Nothing()
        return Some(10 // x)

    assert Some(2).bind(safe_divide).get_or_else(0) == 5
    assert Some(0).bind(safe_divide).is_none()
    assert Nothing().bind(safe_divide).is_none()


def test_either_bind():
    def safe_divide(x: int) -> Either[str, int]:
        if x == 0:
            return Left("Division by zero")
        return Right(10 // x)

    assert Right(2).bind(safe_divide).get_or_else(0) == 5
    assert Right(0).bind(safe_divide).get_error() == "Division by zero"
    assert Left("original error").bind(safe_divide).get_error() == "original error"
    assert Left("e").map(lambda x: x * 2).is_left()
    with pytest.raises(ValueError):
        Right(1).get_error()


def test_safe_lookups():
    cats, _, banks = make_refs()

    result = safe_category(cats, "cat1")
    assert result.is_some()
    assert result.get_or_else(None).name == "Food"
    assert safe_category(cats, "nonexistent").is_none()
    assert safe_category(cats, None).is_none()
    assert safe_bank_account(banks, "b1").map(lambda b: b.bank_name) == Some("Nubank")


def test_parse_date():
    assert parse_date("2024-03-10") == Some(date(2024, 3, 10))
    assert parse_date("2024-03-10T23:59:00Z") == Some(date(2024, 3, 10))
    assert parse_date(datetime(2024, 3, 10, 8, 0)) == Some(date(2024, 3, 10))
    assert parse_date(date(2024, 2, 29)) == Some(date(2024, 2, 29))
    assert parse_date("2023-02-29").is_none()
    assert parse_date("").is_none()
    assert parse_date(None).is_none()
    assert parse_date(20240310).is_none()


def test_validate_transaction_success():
    cats, subs, banks = make_refs()
    t = make_tx(sub_category="sub1")
    result = validate_transaction(t, cats, subs, banks)

    assert result.is_right()
    assert result.get_or_else(None).id == "t1"


def test_validate_transaction_errors():
    cats, subs, banks = make_refs()
    cases = {
        "invalid_type": make_tx(type="transfer"),
        "invalid_date": make_tx(date="31/01/2025"),
        "negative_amount": make_tx(amount=Decimal(-5)),
        "category_not_found": make_tx(category="ghost"),
        "category_type_mismatch": make_tx(type="income"),
        "subcategory_mismatch": make_tx(sub_category="sub2"),
        "bank_account_not_found": make_tx(type="investment", category=None, bank_account="b9"),
    }
    for code, t in cases.items():
        result = validate_transaction(t, cats, subs, banks)
        assert result.is_left(), code
        assert result.get_error()["error"] == code


def test_investments_may_be_negative():
    cats, subs, banks = make_refs()
    t = make_tx(type="investment", category=None, bank_account="b1", amount=Decimal(-250))
    assert validate_transaction(t, cats, subs, banks).is_right()


def test_signed_investment_amount():
    assert signed_investment_amount(Decimal(100), "entry") == 100
    assert signed_investment_amount(Decimal(100), "withdrawal") == -100
    assert signed_investment_amount(Decimal(-100), "entry") == 100
    with pytest.raises(ValueError):
        signed_investment_amount(Decimal(1), "sideways")


def test_validate_transaction_first_failure_wins():
    cats, subs, banks = make_refs()
    t = make_tx(amount=Decimal(-5), category="ghost", sub_category="sub2")
    assert validate_transaction(t, cats, subs, banks).get_error()["error"] == "negative_amount"

    t = make_tx(type="income", category="cat1", sub_category="sub1")
    assert validate_transaction(t, cats, subs, banks).get_error()["error"] == "category_type_mismatch"


def test_validate_transaction_unknown_subcategory():
    cats, subs, banks = make_refs()
    result = validate_transaction(make_tx(sub_category="ghost"), cats, subs, banks)
    assert result.get_error()["error"] == "subcategory_mismatch"
    assert result.get_error()["subcategory_id"] == "ghost"
