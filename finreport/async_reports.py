import asyncio
import logging
from typing import Iterable, List, Tuple

from finreport.domain import Transaction
from finreport.filters import Selector
from finreport.reports import MonthlyReport, build_monthly_report
from finreport.series import ProvisionedPoint, RealizedPoint, provisioned_series, realized_series

logger = logging.getLogger(__name__)


async def reports_for_periods(
    trans: Iterable[Transaction], periods: List[Tuple[Selector, Selector]]
) -> List[MonthlyReport]:
    """Build one report per (year, month) period concurrently.

    Results come back in the order of ``periods``. The shared transaction
    tuple is only read, so the tasks can interleave freely.
    """
    trans = tuple(trans)

    async def one(year: Selector, month: Selector) -> MonthlyReport:
        report = build_monthly_report(trans, year, month)
        await asyncio.sleep(0)  # cooperate
        return report

    logger.debug(f"Building {len(periods)} period reports over {len(trans)} transactions")
    return list(await asyncio.gather(*(one(y, m) for y, m in periods)))


async def series_for_years(
    trans: Iterable[Transaction], years: List[Selector]
) -> dict:
    """Realized and provisioned series for several years, keyed by year."""
    trans = tuple(trans)

    async def one(year: Selector) -> Tuple[Selector, Tuple[Tuple[RealizedPoint, ...], Tuple[ProvisionedPoint, ...]]]:
        realized = realized_series(trans, year)
        await asyncio.sleep(0)
        return year, (realized, provisioned_series(trans, year))

    results = await asyncio.gather(*(one(y) for y in years))
    return {k: v for k, v in results}
