from dataclasses import dataclass
from typing import Optional, Union

from finreport.domain import INVESTMENT, BankAccount, Category, SubCategory, Transaction
from finreport.functional import safe_bank_account, safe_category, safe_subcategory

CATEGORY_NOT_FOUND = "Category not found"
ACCOUNT_NOT_SPECIFIED = "Account not specified"
ACCOUNT_NOT_FOUND = "Account not found"


@dataclass(frozen=True)
class Unresolved:
    """A reference that could not be resolved against the loaded collections.

    ``ref_id`` is the dangling id, or None when the transaction carried no
    reference at all. Renders as its fallback label but never equals a str.
    """
    ref_id: Optional[str]
    label: str

    def __str__(self) -> str:
        return self.label


Label = Union[str, Unresolved]


def category_label(cats: tuple[Category, ...], cat_id: Optional[str]) -> Label:
    return safe_category(cats, cat_id).map(lambda c: c.name).get_or_else(
        Unresolved(cat_id, CATEGORY_NOT_FOUND)
    )


def subcategory_label(subs: tuple[SubCategory, ...], sub_id: Optional[str]) -> Optional[str]:
    return safe_subcategory(subs, sub_id).map(lambda s: s.name).get_or_else(None)


def bank_label(banks: tuple[BankAccount, ...], bank_id: Optional[str], masked: bool = False) -> Label:
    if bank_id is None:
        return Unresolved(None, ACCOUNT_NOT_SPECIFIED)
    bank = safe_bank_account(banks, bank_id).get_or_else(None)
    if bank is None:
        return Unresolved(bank_id, ACCOUNT_NOT_FOUND)
    if masked:
        return f"{bank.bank_name} - {bank.masked_number}"
    return bank.bank_name


def display_title(
    t: Transaction,
    cats: tuple[Category, ...],
    subs: tuple[SubCategory, ...] = (),
) -> str:
    """Headline shown for a transaction in detail listings.

    Investments use their observation (or "Investment"); income and expenses
    prefer the sub-category name and fall back to the category label.
    """
    if t.type == INVESTMENT:
        return t.observation or "Investment"
    sub_name = subcategory_label(subs, t.sub_category)
    if sub_name:
        return sub_name
    return str(category_label(cats, t.category))


def display_subtitle(
    t: Transaction,
    cats: tuple[Category, ...],
    subs: tuple[SubCategory, ...] = (),
) -> str:
    parts = []
    if subcategory_label(subs, t.sub_category):
        parts.append(str(category_label(cats, t.category)))
    if t.observation:
        parts.append(t.observation)
    return " • ".join(parts)
