"""Monthly progress: year-to-date totals and month-over-month movement"""

import logging
from freee_notifier.domain.models import IncompleteSnapshot, MonthlyProgress, SnapshotResult
from freee_notifier.domain.trial_balance import EXPENSES, SALES, reduce_category

logger = logging.getLogger(__name__)


def growth_rate(current: int, previous: int) -> float:
    """Percent change; 0.0 when the previous value is zero or negative"""
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def compute_progress(
    current_month: SnapshotResult,
    last_month: SnapshotResult,
    year_to_date: SnapshotResult,
) -> MonthlyProgress:
    """
    Combine three trial balances into a MonthlyProgress.

    - Cumulative sales/expenses come from the year-to-date snapshot
    - Growth rates and the expense increase compare current vs last month
    - Any incomplete snapshot yields an all-zero result
    """
    incomplete = [
        result for result in (current_month, last_month, year_to_date)
        if isinstance(result, IncompleteSnapshot)
    ]
    if incomplete:
        logger.warning(
            "Trial P&L data is incomplete, using zero progress",
            extra={"reasons": [result.reason for result in incomplete]},
        )
        return MonthlyProgress()

    current_sales = reduce_category(year_to_date, SALES)
    current_expenses = reduce_category(year_to_date, EXPENSES)

    current_month_sales = reduce_category(current_month, SALES)
    last_month_sales = reduce_category(last_month, SALES)
    current_month_expenses = reduce_category(current_month, EXPENSES)
    last_month_expenses = reduce_category(last_month, EXPENSES)

    current_profit = current_sales - current_expenses
    profit_margin = current_profit / current_sales * 100 if current_sales > 0 else 0.0

    return MonthlyProgress(
        current_sales=current_sales,
        current_expenses=current_expenses,
        current_profit=current_profit,
        last_sales=last_month_sales,
        last_expenses=last_month_expenses,
        sales_growth_rate=growth_rate(current_month_sales, last_month_sales),
        expense_growth_rate=growth_rate(current_month_expenses, last_month_expenses),
        profit_margin=profit_margin,
        monthly_expense_increase=current_month_expenses - last_month_expenses,
    )
