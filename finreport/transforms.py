import json
import logging
from decimal import Decimal
from typing import Iterable, List, Tuple

from finreport.domain import (
    EXPENSE,
    INCOME,
    INVESTMENT,
    BankAccount,
    Category,
    Dataset,
    SubCategory,
    Transaction,
)
from finreport.functional import signed_investment_amount, validate_transaction

logger = logging.getLogger(__name__)


def to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value or 0))


def transaction_from_row(row: dict) -> Transaction:
    """Build a Transaction from a stored row.

    Accepts both the field names used here and the backend column names
    (``category_id``, ``subcategory_id``, ``bank_account_id``). An investment
    row may carry an unsigned amount plus ``direction`` ("entry" or
    "withdrawal") instead of a signed amount.
    """
    amount = to_decimal(row.get("amount"))
    if row["type"] == INVESTMENT and row.get("direction"):
        amount = signed_investment_amount(amount, row["direction"])
    return Transaction(
        id=str(row["id"]),
        type=row["type"],
        amount=amount,
        category=row.get("category", row.get("category_id")),
        date=row.get("date"),
        sub_category=row.get("sub_category", row.get("subcategory_id")),
        paid=bool(row.get("paid")),
        received=bool(row.get("received")),
        bank_account=row.get("bank_account", row.get("bank_account_id")),
        observation=row.get("observation") or "",
        attachment_url=row.get("attachment_url"),
    )


def partition_valid(
    trans: Iterable[Transaction],
    categories: Tuple[Category, ...],
    subcategories: Tuple[SubCategory, ...] = (),
    bank_accounts: Tuple[BankAccount, ...] = (),
) -> Tuple[Tuple[Transaction, ...], Tuple[Tuple[Transaction, dict], ...]]:
    """Split transactions into (valid, rejected); rejected pairs carry the error dict."""
    valid: List[Transaction] = []
    rejected: List[Tuple[Transaction, dict]] = []
    for t in trans:
        result = validate_transaction(t, categories, subcategories, bank_accounts)
        if result.is_right():
            valid.append(t)
        else:
            rejected.append((t, result.get_error()))
    return tuple(valid), tuple(rejected)


def load_seed(path: str) -> Dataset:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    categories = tuple(Category(**c) for c in data["categories"])
    subcategories = tuple(SubCategory(**s) for s in data.get("subcategories", []))
    bank_accounts = tuple(BankAccount(**b) for b in data.get("bank_accounts", []))
    transactions, rejected = partition_valid(
        (transaction_from_row(t) for t in data["transactions"]),
        categories, subcategories, bank_accounts,
    )

    for t, error in rejected:
        logger.warning(f"Skipping transaction {t.id} from {path}: {error['error']} ({error['message']})")

    logger.info(
        f"Loaded {len(transactions)} transactions, {len(categories)} categories, "
        f"{len(subcategories)} subcategories and {len(bank_accounts)} bank accounts from {path}"
    )
    return Dataset(transactions, categories, subcategories, bank_accounts)


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def update_transaction(
    trans: Tuple[Transaction, ...], new: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(new if t.id == new.id else t for t in trans)


def remove_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == INCOME, trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == EXPENSE, trans))


def investment_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == INVESTMENT, trans))
