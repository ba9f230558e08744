"""Daily report assembly - fetches freee data and runs the report calculations"""

import asyncio
import logging
import time
from datetime import date
from typing import Any, Awaitable, List, Protocol, Sequence
from freee_notifier.domain.models import (
    AccountItem,
    CompanyRef,
    Deal,
    FlaggedDeal,
    Report,
    SnapshotResult,
    WalletTransaction,
)
from freee_notifier.domain.exceptions import PeriodNotFoundError
from freee_notifier.domain.progress import compute_progress
from freee_notifier.domain.receipts import DEAL_URL_TEMPLATE, filter_flagged_deals
from freee_notifier.domain.tax import estimate_tax
from freee_notifier.domain.trial_balance import expense_breakdown
from freee_notifier.utils.date_utils import report_periods
from freee_notifier.infrastructure.observability.logging import log_report
from freee_notifier.infrastructure.observability.metrics import period_fallback_counter

logger = logging.getLogger(__name__)


class AccountingSource(Protocol):
    """What the assembler needs from the accounting API"""

    async def get_trial_balance(
        self, company_id: int, fiscal_year: int, end_month: int | None = None
    ) -> SnapshotResult: ...

    async def get_deals(self, company_id: int) -> List[Deal]: ...

    async def get_wallet_txns(self, company_id: int) -> List[WalletTransaction]: ...


async def fetch_trial_balance_with_fallback(
    source: AccountingSource,
    company_id: int,
    fiscal_year: int,
    end_month: int | None = None,
) -> SnapshotResult:
    """
    Fetch a trial balance, retrying once against the previous fiscal year.

    A company whose books have not rolled over yet has no fiscal year for the
    current calendar year. The retry asks for the whole previous year (month
    12) when an end month was requested. A failure of the retry propagates.
    """
    try:
        return await source.get_trial_balance(company_id, fiscal_year, end_month)
    except PeriodNotFoundError:
        period_fallback_counter.inc()
        logger.info(
            "Fiscal year not found, falling back to previous year",
            extra={"company_id": company_id, "fiscal_year": fiscal_year, "fallback_year": fiscal_year - 1},
        )
        return await source.get_trial_balance(
            company_id,
            fiscal_year - 1,
            12 if end_month is not None else None,
        )


async def gather_or_cancel(*aws: Awaitable[Any]) -> List[Any]:
    """
    Run awaitables concurrently like asyncio.gather.

    On the first failure the remaining ones are cancelled and awaited before
    the error is re-raised, so no request outlives the report.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class ReportAssembler:
    """Builds a Report for one company"""

    def __init__(
        self,
        source: AccountingSource,
        required_items: Sequence[AccountItem],
        url_template: str = DEAL_URL_TEMPLATE,
    ):
        self.source = source
        self.required_items = list(required_items)
        self.url_template = url_template

    async def assemble(self, company: CompanyRef, today: date) -> Report:
        """
        Generate the daily report.

        Flow:
        1. Fetch deals and three trial balances concurrently
           (current month, last month, fiscal year to date)
        2. Flag deals missing receipts
        3. Compute monthly progress and the tax estimate from it
        4. Break down year-to-date expenses

        Any fetch failure other than the fiscal-year fallback cancels the other
        fetches and propagates.
        """
        start_time = time.time()
        periods = report_periods(today)
        company_id = company.company_id

        deals, current_month, last_month, year_to_date = await gather_or_cancel(
            self.source.get_deals(company_id),
            fetch_trial_balance_with_fallback(
                self.source, company_id, periods.current_year, periods.current_month
            ),
            fetch_trial_balance_with_fallback(
                self.source, company_id, periods.last_month_year, periods.last_month
            ),
            fetch_trial_balance_with_fallback(self.source, company_id, periods.current_year),
        )

        flagged = filter_flagged_deals(deals, self.required_items, url_template=self.url_template)
        progress = compute_progress(current_month, last_month, year_to_date)
        tax_estimate = estimate_tax(progress.current_sales, progress.current_expenses)

        report = Report(
            company_id=company_id,
            deals=flagged,
            monthly_progress=progress,
            expense_breakdown=expense_breakdown(year_to_date),
            fiscal_year=year_to_date.fiscal_year,
            tax_estimate=tax_estimate,
        )

        log_report(
            company_id=company_id,
            fiscal_year=report.fiscal_year,
            flagged_deals=len(flagged),
            current_sales=progress.current_sales,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return report

    async def flagged_deals_with_descriptions(self, company: CompanyRef) -> List[FlaggedDeal]:
        """Flagged deals enriched with matching wallet transaction descriptions"""
        deals, wallet_txns = await gather_or_cancel(
            self.source.get_deals(company.company_id),
            self.source.get_wallet_txns(company.company_id),
        )
        return filter_flagged_deals(deals, self.required_items, wallet_txns, url_template=self.url_template)
