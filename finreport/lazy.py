from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional, Tuple

from finreport.domain import EXPENSE, Category, Transaction
from finreport.references import Label, category_label


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def top_categories(
    trans: Iterable[Transaction], cats: tuple[Category, ...], k: int, tx_type: str = EXPENSE
) -> Iterator[tuple[Label, Decimal]]:
    totals_by_category: dict[Optional[str], Decimal] = defaultdict(Decimal)

    for t in iter_transactions(trans, lambda t: t.type == tx_type):
        totals_by_category[t.category] += t.amount

    ordered: list[Tuple[Optional[str], Decimal]] = sorted(
        totals_by_category.items(), key=lambda item: item[1], reverse=True
    )

    for cat_id, amount in ordered[: max(0, k)]:
        yield category_label(cats, cat_id), amount
