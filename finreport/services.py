import logging
from typing import Any, Callable, Dict, Sequence

from finreport.domain import Dataset
from finreport.filters import ALL, Selector, filter_by_period, period_key
from finreport.reports import build_report, category_rows, bank_rows, investment_statement
from finreport.series import cash_flow_summary

logger = logging.getLogger(__name__)

Calculator = Callable[..., Dict[str, Any]]


def calc_summary(dataset: Dataset, selected, year, month, acc) -> Dict[str, Any]:
    return {"report": build_report(selected, period_key(year, month))}


def calc_breakdowns(dataset: Dataset, selected, year, month, acc) -> Dict[str, Any]:
    report = acc.get("report") or build_report(selected)
    return {
        "income_rows": category_rows(report.income_by_category, dataset.categories),
        "expense_rows": category_rows(report.expenses_by_category, dataset.categories),
        "bank_rows": bank_rows(report.investments_by_bank, dataset.bank_accounts),
    }


def calc_investments(dataset: Dataset, selected, year, month, acc) -> Dict[str, Any]:
    return {"investments": investment_statement(selected, dataset.bank_accounts)}


def calc_cash_flow(dataset: Dataset, selected, year, month, acc) -> Dict[str, Any]:
    return {"cash_flow": cash_flow_summary(dataset.transactions, year, month)}


DEFAULT_CALCULATORS = (calc_summary, calc_breakdowns, calc_investments, calc_cash_flow)


class ReportService:
    """Facade for period reports built from injected calculators.

    calculators: sequence of functions taking
    (dataset, selected_transactions, year, month, acc) -> dict (partial results).
    ``acc`` holds the merged output of the calculators that ran before.
    """

    def __init__(self, calculators: Sequence[Calculator] = DEFAULT_CALCULATORS):
        self.calculators = calculators

    def period_report(self, dataset: Dataset, year: Selector = ALL, month: Selector = ALL) -> Dict[str, Any]:
        """Run every calculator over the selected period and collect the steps."""
        selected = filter_by_period(dataset.transactions, year, month)
        report = {
            "period": period_key(year, month),
            "transactions": len(selected),
            "steps": [],
            "result": {}
        }

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            name = getattr(calc, "__name__", str(calc))
            try:
                out = calc(dataset, selected, year, month, dict(acc))
            except Exception as e:
                logger.error(f"Calculator {name} failed for {report['period']}: {e}")
                report["steps"].append({"calculator": name, "error": str(e)})
                continue
            report["steps"].append({"calculator": name, "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        logger.debug(f"Period {report['period']}: {len(selected)} transactions, {len(report['steps'])} steps")
        return report
