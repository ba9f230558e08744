"""Report generation and delivery to LINE users"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Sequence, Tuple
from freee_notifier.config import settings
from freee_notifier.domain.exceptions import NotLinkedError
from freee_notifier.domain.models import AccountItem, CompanyRef, FlaggedDeal, Report
from freee_notifier.domain.report import AccountingSource, ReportAssembler
from freee_notifier.infrastructure.clients.freee import FreeeClient
from freee_notifier.infrastructure.clients.line import LineClient
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.infrastructure.observability.metrics import broadcast_recipient_counter, record_report
from freee_notifier.messaging.daily_report import daily_report_message
from freee_notifier.messaging.receipt_list import receipt_list_message
from freee_notifier.utils.date_utils import today_in

logger = logging.getLogger(__name__)

Recipient = Tuple[str, CompanyRef]  # (line_user_id, company)


@dataclass
class BroadcastResult:
    delivered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # not linked


class DailyReportNotifier:
    """Generates reports with freee data and pushes them over LINE"""

    def __init__(
        self,
        line_client: LineClient,
        required_items: Sequence[AccountItem],
        source_factory: Callable[[CompanyRef], AccountingSource] | None = None,
        timezone: str | None = None,
    ):
        self.line_client = line_client
        self.required_items = list(required_items)
        self.source_factory = source_factory or (lambda company: FreeeClient(access_token=company.access_token))
        self.timezone = timezone or settings.timezone

    def _assembler(self, company: CompanyRef) -> ReportAssembler:
        return ReportAssembler(
            self.source_factory(company),
            self.required_items,
            url_template=settings.deal_url_template,
        )

    async def generate(self, company: CompanyRef, today: date | None = None) -> Report:
        """Build the daily report; failures are counted and re-raised"""
        try:
            report = await self._assembler(company).assemble(company, today or today_in(self.timezone))
        except Exception:
            record_report(success=False)
            raise
        record_report(success=True, flagged_deals=len(report.deals))
        return report

    async def send_daily_report(self, line_user_id: str, company: CompanyRef, today: date | None = None) -> Report:
        """Generate the report and push it; nothing is sent if generation fails"""
        today = today or today_in(self.timezone)
        report = await self.generate(company, today)
        await self.line_client.push_message(line_user_id, [daily_report_message(report, today)])
        return report

    async def flagged_deals(self, company: CompanyRef) -> List[FlaggedDeal]:
        """Deals missing receipts, with wallet transaction descriptions"""
        return await self._assembler(company).flagged_deals_with_descriptions(company)

    async def send_receipt_list(self, line_user_id: str, company: CompanyRef) -> List[FlaggedDeal]:
        deals = await self.flagged_deals(company)
        await self.line_client.push_message(line_user_id, [receipt_list_message(deals)])
        return deals

    async def _deliver(self, line_user_id: str, company: CompanyRef, today: date) -> bool:
        try:
            await self.send_daily_report(line_user_id, company, today)
        except Exception:
            # One recipient's failure must not affect the rest of the batch
            logger.exception(
                "Daily report delivery failed",
                extra={"line_user_id": line_user_id, "company_id": company.company_id},
            )
            broadcast_recipient_counter.labels(outcome="failed").inc()
            return False
        broadcast_recipient_counter.labels(outcome="delivered").inc()
        return True

    @staticmethod
    def collect_recipients(repository: UserRepository) -> Tuple[List[Recipient], List[str]]:
        """Linked users with their company, and the ids of users without one"""
        recipients, skipped = [], []
        for line_user_id in repository.list_line_user_ids():
            try:
                recipients.append((line_user_id, repository.get_company_ref(line_user_id)))
            except NotLinkedError:
                logger.info("Skipping user without a linked company", extra={"line_user_id": line_user_id})
                skipped.append(line_user_id)
        return recipients, skipped

    async def broadcast(self, repository: UserRepository, today: date | None = None) -> BroadcastResult:
        """Send the daily report to every registered user"""
        recipients, skipped = self.collect_recipients(repository)
        result = await self.deliver_all(recipients, today)
        result.skipped.extend(skipped)
        return result

    async def deliver_all(self, recipients: Sequence[Recipient], today: date | None = None) -> BroadcastResult:
        """
        Push daily reports to a batch of recipients.

        Each recipient is an independent task. A failed delivery is logged
        and counted; it never cancels the other recipients.
        """
        today = today or today_in(self.timezone)
        result = BroadcastResult()

        outcomes = await asyncio.gather(
            *(self._deliver(line_user_id, company, today) for line_user_id, company in recipients)
        )
        for (line_user_id, _), delivered in zip(recipients, outcomes):
            (result.delivered if delivered else result.failed).append(line_user_id)

        logger.info(
            "Daily report broadcast finished",
            extra={"delivered": len(result.delivered), "failed": len(result.failed)},
        )
        return result
