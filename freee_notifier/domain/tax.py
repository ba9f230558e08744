"""Progressive income tax estimate for sole proprietors"""

import math
from dataclasses import dataclass
from typing import List
from freee_notifier.domain.models import TaxEstimate

BASIC_DEDUCTION = 480_000  # 基礎控除
BLUE_RETURN_DEDUCTION = 650_000  # 青色申告特別控除
TOTAL_DEDUCTION = BASIC_DEDUCTION + BLUE_RETURN_DEDUCTION


@dataclass(frozen=True)
class TaxBracket:
    limit: float  # inclusive upper bound of taxable income, math.inf for the top bracket
    rate: int  # percent
    deduction: int  # quick-calculation deduction


TAX_BRACKETS: List[TaxBracket] = [
    TaxBracket(limit=1_950_000, rate=5, deduction=0),
    TaxBracket(limit=3_300_000, rate=10, deduction=97_500),
    TaxBracket(limit=6_950_000, rate=20, deduction=427_500),
    TaxBracket(limit=9_000_000, rate=23, deduction=636_000),
    TaxBracket(limit=18_000_000, rate=33, deduction=1_536_000),
    TaxBracket(limit=40_000_000, rate=40, deduction=2_796_000),
    TaxBracket(limit=math.inf, rate=45, deduction=4_796_000),
]


def find_bracket_index(taxable_income: int, brackets: List[TaxBracket] = TAX_BRACKETS) -> int:
    """Index of the first bracket whose limit covers the income, -1 if none does"""
    for index, bracket in enumerate(brackets):
        if taxable_income <= bracket.limit:
            return index
    return -1


def estimate_tax(sales: int, expenses: int) -> TaxEstimate:
    """
    Estimate income tax with the quick-calculation table.

    Requirements:
    - Only the basic and blue-return deductions are applied
    - tax = floor(taxable_income * rate - deduction) of the selected bracket
    - The "next" bracket is the one below the current, i.e. the threshold the
      taxable income has to drop under to get a lower marginal rate

    Example:
        sales 10,000,000, expenses 0
        taxable = 10,000,000 - 1,130,000 = 8,870,000 → 23% bracket
        tax = floor(8,870,000 * 0.23 - 636,000) = 1,404,100
        amount_to_next_bracket = 8,870,000 - 6,950,000 = 1,920,000
    """
    income = sales - expenses
    taxable_income = max(0, income - TOTAL_DEDUCTION)

    index = find_bracket_index(taxable_income)
    if index < 0:
        # Unreachable with an unbounded top bracket
        index = len(TAX_BRACKETS) - 1
    bracket = TAX_BRACKETS[index]

    # Integer arithmetic keeps floor() exact for percentage rates
    estimated_tax = (taxable_income * bracket.rate - bracket.deduction * 100) // 100

    lower = TAX_BRACKETS[index - 1] if index > 0 else None
    next_bracket_limit = int(lower.limit) if lower else None

    return TaxEstimate(
        income=income,
        taxable_income=taxable_income,
        estimated_tax=estimated_tax,
        current_rate=bracket.rate,
        next_bracket_limit=next_bracket_limit,
        next_rate=lower.rate if lower else None,
        amount_to_next_bracket=(
            taxable_income - next_bracket_limit if next_bracket_limit is not None else None
        ),
    )
