from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional, Tuple, Union

INCOME = "income"
EXPENSE = "expense"
INVESTMENT = "investment"

TRANSACTION_TYPES = (INCOME, EXPENSE, INVESTMENT)
CATEGORY_TYPES = (INCOME, EXPENSE)
ACCOUNT_TYPES = ("checking", "savings", "credit_card", "investment")


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str          # income | expense
    color: str = ""


@dataclass(frozen=True)
class SubCategory:
    id: str
    name: str
    parent_id: str     # owning Category.id
    type: str


@dataclass(frozen=True)
class BankAccount:
    id: str
    bank_name: str
    account_number: str
    type: str          # checking | savings | credit_card | investment

    @property
    def masked_number(self) -> str:
        return f"****{self.account_number[-4:]}"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str                              # income | expense | investment
    amount: Decimal                        # signed only for investments
    category: Optional[str]                # Category.id
    date: Union[str, date]                 # e.g. "2024-03-10"
    sub_category: Optional[str] = None
    paid: bool = False                     # expenses only
    received: bool = False                 # income only
    bank_account: Optional[str] = None     # investments only
    observation: str = ""
    attachment_url: Optional[str] = None

    def __post_init__(self):
        # floats and ints are stored as Decimal through str() so 0.1 stays 0.1
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))


class Dataset(NamedTuple):
    transactions: Tuple[Transaction, ...]
    categories: Tuple[Category, ...]
    subcategories: Tuple[SubCategory, ...]
    bank_accounts: Tuple[BankAccount, ...]
