"""Trial balance parsing and reduction to category totals"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
from freee_notifier.domain.exceptions import FreeeAPIError
from freee_notifier.domain.models import (
    BalanceLine,
    CompleteSnapshot,
    ExpenseItem,
    IncompleteSnapshot,
    SnapshotResult,
    TrialBalanceSnapshot,
)

logger = logging.getLogger(__name__)

INCOME_CATEGORY = "収入金額"
EXPENSE_CATEGORY = "経費"


@dataclass(frozen=True)
class CategoryMatcher:
    """
    How to total one P&L category.

    The total row (category name + total_line) wins when present. Otherwise
    non-total lines are summed when their item name contains any of
    `item_tokens` and none of `excluded_tokens`.
    """

    category: str
    item_tokens: Tuple[str, ...]
    excluded_tokens: Tuple[str, ...] = ()

    def matches_item(self, item_name: Optional[str]) -> bool:
        if not item_name:
            return False
        if any(token in item_name for token in self.excluded_tokens):
            return False
        return any(token in item_name for token in self.item_tokens)


SALES = CategoryMatcher(category=INCOME_CATEGORY, item_tokens=("売上",), excluded_tokens=("原価",))
EXPENSES = CategoryMatcher(category=EXPENSE_CATEGORY, item_tokens=("費",))


def parse_trial_balance(payload: Any, fiscal_year: int, end_month: int | None = None) -> SnapshotResult:
    """
    Convert a freee trial_pl response into a snapshot result.

    A body without trial_pl.balances is incomplete (reduced to zeros later).
    A body that is not an object, or lines with unreadable values, are
    malformed and raise FreeeAPIError.
    """
    if not isinstance(payload, dict):
        raise FreeeAPIError("Invalid trial balance data from freee: expected a JSON object")

    report = payload.get("trial_pl")
    if not isinstance(report, dict):
        return IncompleteSnapshot(fiscal_year, end_month, "missing trial_pl")

    balances = report.get("balances")
    if not isinstance(balances, list):
        return IncompleteSnapshot(report.get("fiscal_year") or fiscal_year, end_month, "missing balances")

    try:
        lines = tuple(
            BalanceLine(
                account_category_name=balance.get("account_category_name") or "",
                account_item_name=balance.get("account_item_name"),
                total_line=bool(balance.get("total_line", False)),
                closing_balance=int(balance.get("closing_balance") or 0),
            )
            for balance in balances
        )
        snapshot_year = int(report.get("fiscal_year") or fiscal_year)
    except (AttributeError, ValueError, TypeError) as e:
        raise FreeeAPIError(f"Invalid trial balance data from freee: {e}") from e

    return CompleteSnapshot(
        TrialBalanceSnapshot(
            fiscal_year=snapshot_year,
            end_month=report.get("end_month", end_month),
            lines=lines,
        )
    )


def reduce_category(result: SnapshotResult, matcher: CategoryMatcher) -> int:
    """Total of one category; zero for incomplete snapshots"""
    if isinstance(result, IncompleteSnapshot):
        return 0

    lines = result.snapshot.lines
    for line in lines:
        if line.total_line and line.account_category_name == matcher.category:
            return line.closing_balance

    matched = [line for line in lines if not line.total_line and matcher.matches_item(line.account_item_name)]
    logger.debug(
        "Category total row missing, summing item lines",
        extra={"category": matcher.category, "matched_lines": len(matched)},
    )
    return sum(line.closing_balance for line in matched)


def expense_breakdown(result: SnapshotResult) -> List[ExpenseItem]:
    """Positive expense items, largest first"""
    if isinstance(result, IncompleteSnapshot):
        return []

    items = [
        ExpenseItem(name=line.account_item_name, amount=line.closing_balance)
        for line in result.snapshot.lines
        if line.account_category_name == EXPENSE_CATEGORY
        and not line.total_line
        and line.closing_balance > 0
        and line.account_item_name
    ]
    return sorted(items, key=lambda item: item.amount, reverse=True)
