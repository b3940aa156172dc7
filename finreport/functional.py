from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Generic, Iterable, Optional, TypeVar, Union

from finreport.domain import (
    CATEGORY_TYPES,
    INVESTMENT,
    TRANSACTION_TYPES,
    BankAccount,
    Category,
    SubCategory,
    Transaction,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return self

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right has no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _find(items: Iterable, item_id: Optional[str]) -> Maybe:
    if item_id is None:
        return Nothing()
    for item in items:
        if item.id == item_id:
            return Some(item)
    return Nothing()


def safe_category(cats: tuple[Category, ...], cat_id: Optional[str]) -> Maybe[Category]:
    return _find(cats, cat_id)


def safe_subcategory(subs: tuple[SubCategory, ...], sub_id: Optional[str]) -> Maybe[SubCategory]:
    return _find(subs, sub_id)


def safe_bank_account(banks: tuple[BankAccount, ...], bank_id: Optional[str]) -> Maybe[BankAccount]:
    return _find(banks, bank_id)


def parse_date(value: Union[str, date, None]) -> Maybe[date]:
    """Read a transaction date, ignoring any time part.

    Accepts ``date``/``datetime`` objects and ISO strings such as
    ``"2024-03-10"`` or ``"2024-03-10T12:00:00"``. Anything else is Nothing().
    """
    if isinstance(value, datetime):
        return Some(value.date())
    if isinstance(value, date):
        return Some(value)
    if not isinstance(value, str):
        return Nothing()
    try:
        return Some(date.fromisoformat(value.strip()[:10]))
    except ValueError:
        return Nothing()


def signed_investment_amount(magnitude: Decimal, direction: str) -> Decimal:
    """Turn an entered magnitude into the stored signed investment amount.

    direction: "entry" (money into the account) or "withdrawal".
    """
    if direction == "entry":
        return abs(magnitude)
    if direction == "withdrawal":
        return -abs(magnitude)
    raise ValueError(f"Unknown investment direction: {direction!r}")


def _check_type(t: Transaction) -> Either[dict, Transaction]:
    if t.type not in TRANSACTION_TYPES:
        return Left({
            "error": "invalid_type",
            "message": f"Unknown transaction type {t.type!r}",
            "type": t.type
        })
    return Right(t)


def _check_date(t: Transaction) -> Either[dict, Transaction]:
    if parse_date(t.date).is_none():
        return Left({
            "error": "invalid_date",
            "message": f"Transaction date {t.date!r} is not a calendar date",
            "date": t.date
        })
    return Right(t)


def _check_magnitude(t: Transaction) -> Either[dict, Transaction]:
    if t.amount < 0:
        return Left({
            "error": "negative_amount",
            "message": f"{t.type.capitalize()} amounts are magnitudes and cannot be negative",
            "amount": t.amount
        })
    return Right(t)


def _check_bank_account(banks: tuple[BankAccount, ...]) -> Callable[[Transaction], Either[dict, Transaction]]:
    def check(t: Transaction) -> Either[dict, Transaction]:
        if t.bank_account is not None and safe_bank_account(banks, t.bank_account).is_none():
            return Left({
                "error": "bank_account_not_found",
                "message": f"Bank account with ID {t.bank_account} does not exist",
                "bank_account_id": t.bank_account
            })
        return Right(t)
    return check


def _check_category(cats: tuple[Category, ...]) -> Callable[[Transaction], Either[dict, Transaction]]:
    def check(t: Transaction) -> Either[dict, Transaction]:
        category = safe_category(cats, t.category).get_or_else(None)
        if category is None:
            return Left({
                "error": "category_not_found",
                "message": f"Category with ID {t.category} does not exist",
                "category_id": t.category
            })
        if category.type not in CATEGORY_TYPES or category.type != t.type:
            return Left({
                "error": "category_type_mismatch",
                "message": f"Category {category.name} is for {category.type}, not {t.type}",
                "category_type": category.type,
                "transaction_type": t.type
            })
        return Right(t)
    return check


def _check_subcategory(subs: tuple[SubCategory, ...]) -> Callable[[Transaction], Either[dict, Transaction]]:
    def check(t: Transaction) -> Either[dict, Transaction]:
        if t.sub_category is None:
            return Right(t)
        parent = safe_subcategory(subs, t.sub_category).map(lambda s: s.parent_id)
        if parent != Some(t.category):
            return Left({
                "error": "subcategory_mismatch",
                "message": f"Subcategory {t.sub_category} does not belong to category {t.category}",
                "subcategory_id": t.sub_category,
                "category_id": t.category
            })
        return Right(t)
    return check


def validate_transaction(
    t: Transaction,
    cats: tuple[Category, ...],
    subs: tuple[SubCategory, ...] = (),
    banks: tuple[BankAccount, ...] = (),
) -> Either[dict, Transaction]:
    """Check one transaction at the data-entry boundary.

    Investments only need a known bank account (their amount is signed);
    income and expenses must be non-negative and filed under a category
    of their own type. The first failing check wins.
    """
    checked = Right(t).bind(_check_type).bind(_check_date)
    if t.type == INVESTMENT:
        return checked.bind(_check_bank_account(banks))
    return (
        checked
        .bind(_check_magnitude)
        .bind(_check_category(cats))
        .bind(_check_subcategory(subs))
    )
