import json
from decimal import Decimal

import pytest

from finreport.domain import Category, Dataset, Transaction
from finreport.transforms import (
    add_transaction,
    expense_transactions,
    income_transactions,
    investment_transactions,
    load_seed,
    partition_valid,
    remove_transaction,
    transaction_from_row,
    update_transaction,
)


def make_tx(id, type="expense", amount=50):
    return Transaction(id=id, type=type, amount=Decimal(amount), category="c1", date="2025-09-01")


SEED = {
    "categories": [{"id": "c1", "name": "Salary", "type": "income", "color": "#10B981"}],
    "subcategories": [{"id": "s1", "name": "Bonus", "parent_id": "c1", "type": "income"}],
    "bank_accounts": [{"id": "b1", "bank_name": "Nubank", "account_number": "1234", "type": "checking"}],
    "transactions": [
        {"id": "t1", "type": "income", "amount": 0.1, "category": "c1", "date": "2025-01-05", "received": True},
        {"id": "t2", "type": "investment", "amount": -20, "category_id": None, "bank_account_id": "b1", "date": "2025-01-06"},
    ],
}


def test_load_seed(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(SEED), encoding="utf-8")

    dataset = load_seed(str(path))

    assert isinstance(dataset, Dataset)
    assert len(dataset.categories) == 1
    assert dataset.subcategories[0].parent_id == "c1"
    assert dataset.bank_accounts[0].masked_number == "****1234"
    t1, t2 = dataset.transactions
    assert t1.amount == Decimal("0.1")
    assert t1.received is True
    assert t1.paid is False
    assert t2.bank_account == "b1"
    assert t2.amount == -20


def test_load_seed_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_seed(str(tmp_path / "missing.json"))


def test_transaction_from_row_backend_columns():
    t = transaction_from_row({
        "id": 7, "type": "expense", "amount": "12.30", "category_id": "c2",
        "subcategory_id": "s3", "date": "2025-02-01", "paid": None, "observation": None,
    })
    assert t.id == "7"
    assert t.amount == Decimal("12.30")
    assert t.category == "c2"
    assert t.sub_category == "s3"
    assert t.paid is False
    assert t.observation == ""


def test_add_transaction_immutability():
    t1 = make_tx("t1")
    transactions = (t1,)
    new_transactions = add_transaction(transactions, make_tx("t2"))

    assert new_transactions is not transactions
    assert len(new_transactions) == 2
    assert len(transactions) == 1


def test_update_and_remove_transaction():
    transactions = (make_tx("t1"), make_tx("t2"))
    updated = update_transaction(transactions, make_tx("t2", amount=75))

    assert updated[1].amount == 75
    assert transactions[1].amount == 50
    assert [t.id for t in remove_transaction(updated, "t1")] == ["t2"]
    assert len(transactions) == 2


def test_partition_by_type():
    transactions = (make_tx("t1", "income"), make_tx("t2"), make_tx("t3", "investment"), make_tx("t4"))
    assert [t.id for t in income_transactions(transactions)] == ["t1"]
    assert [t.id for t in expense_transactions(transactions)] == ["t2", "t4"]
    assert [t.id for t in investment_transactions(transactions)] == ["t3"]


def test_load_seed_skips_invalid_rows(tmp_path, caplog):
    seed = dict(SEED)
    seed["categories"] = SEED["categories"] + [{"id": "c2", "name": "Rent", "type": "expense"}]
    seed["transactions"] = SEED["transactions"] + [
        {"id": "t3", "type": "income", "amount": -500, "category": "c2", "date": "2025-01-07"},
        {"id": "t4", "type": "expense", "amount": 80, "category": "c1", "date": "2025-01-08"},
        {"id": "t5", "type": "investment", "amount": 10, "bank_account": "b9", "date": "2025-01-09"},
    ]
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(seed), encoding="utf-8")

    with caplog.at_level("WARNING", logger="finreport.transforms"):
        dataset = load_seed(str(path))

    assert [t.id for t in dataset.transactions] == ["t1", "t2"]
    assert "negative_amount" in caplog.text
    assert "category_type_mismatch" in caplog.text
    assert "bank_account_not_found" in caplog.text


def test_partition_valid_reports_errors():
    cats = (Category("c1", "Salary", "income"),)
    good = make_tx("t1", "income")
    bad = make_tx("t2", "expense")

    valid, rejected = partition_valid((good, bad), cats)

    assert valid == (good,)
    assert rejected[0][0] is bad
    assert rejected[0][1]["error"] == "category_type_mismatch"


def test_transaction_from_row_investment_direction():
    entry = transaction_from_row({"id": 1, "type": "investment", "amount": 300, "direction": "entry", "date": "2025-03-01"})
    withdrawal = transaction_from_row({"id": 2, "type": "investment", "amount": 300, "direction": "withdrawal", "date": "2025-03-02"})
    plain = transaction_from_row({"id": 3, "type": "investment", "amount": -40, "date": "2025-03-03"})

    assert entry.amount == 300
    assert withdrawal.amount == -300
    assert plain.amount == -40
    with pytest.raises(ValueError):
        transaction_from_row({"id": 4, "type": "investment", "amount": 1, "direction": "sideways", "date": "2025-03-04"})
