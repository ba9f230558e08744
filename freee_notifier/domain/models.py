"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union


@dataclass(frozen=True)
class BalanceLine:
    """Single row of a freee trial balance (P&L)"""

    account_category_name: str  # e.g. "収入金額", "経費"
    account_item_name: Optional[str]
    total_line: bool
    closing_balance: int


@dataclass(frozen=True)
class TrialBalanceSnapshot:
    """Trial balance for a fiscal year, optionally cut off at an end month"""

    fiscal_year: int
    end_month: Optional[int]
    lines: tuple[BalanceLine, ...]


@dataclass(frozen=True)
class CompleteSnapshot:
    snapshot: TrialBalanceSnapshot

    @property
    def fiscal_year(self) -> int:
        return self.snapshot.fiscal_year


@dataclass(frozen=True)
class IncompleteSnapshot:
    """Response arrived but lacked the trial_pl balances section"""

    fiscal_year: int
    end_month: Optional[int]
    reason: str


SnapshotResult = Union[CompleteSnapshot, IncompleteSnapshot]


@dataclass(frozen=True)
class DealDetail:
    account_item_id: int


@dataclass(frozen=True)
class Payment:
    """Settlement of a deal from a walletable (bank account, card, cash)"""

    date: date
    amount: int
    from_walletable_id: Optional[int]


@dataclass(frozen=True)
class Deal:
    """Transaction record from freee"""

    id: int
    issue_date: date
    amount: int
    details: List[DealDetail]
    receipt_ids: List[int]
    payments: List[Payment] = field(default_factory=list)


@dataclass(frozen=True)
class WalletTransaction:
    """Bank/card statement line imported into freee"""

    date: date
    amount: int
    walletable_id: int
    description: str


@dataclass(frozen=True)
class AccountItem:
    """freee account item that requires a receipt"""

    name: str
    id: int


@dataclass
class FlaggedDeal:
    """Deal that needs a receipt but has none attached"""

    id: int
    date: date
    url: str
    amount: int
    account_item_names: List[str]
    payment_descriptions: List[str] = field(default_factory=list)


@dataclass
class MonthlyProgress:
    """Year-to-date totals with month-over-month movement"""

    current_sales: int = 0
    current_expenses: int = 0
    current_profit: int = 0
    last_sales: int = 0
    last_expenses: int = 0
    sales_growth_rate: float = 0.0
    expense_growth_rate: float = 0.0
    profit_margin: float = 0.0
    monthly_expense_increase: int = 0


@dataclass
class TaxEstimate:
    """Rough income tax estimate for the fiscal year"""

    income: int
    taxable_income: int
    estimated_tax: int
    current_rate: int  # percent
    next_bracket_limit: Optional[int]
    next_rate: Optional[int]  # percent
    amount_to_next_bracket: Optional[int]  # <= 0 means already below the lower bracket


@dataclass
class ExpenseItem:
    name: str
    amount: int


@dataclass
class Report:
    """Daily report for one company"""

    company_id: int
    deals: List[FlaggedDeal]
    monthly_progress: MonthlyProgress
    expense_breakdown: List[ExpenseItem]
    fiscal_year: int
    tax_estimate: TaxEstimate


@dataclass(frozen=True)
class CompanyRef:
    """Active freee company of a LINE user"""

    company_id: int
    access_token: str
