"""Scheduled jobs - run from cron, e.g. `python -m freee_notifier.worker` at 10:00 JST"""

import asyncio
import logging
from freee_notifier.config import settings
from freee_notifier.domain.receipts import load_receipt_required_items
from freee_notifier.infrastructure.clients.line import LineClient
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.infrastructure.database.session import SessionLocal
from freee_notifier.infrastructure.observability.logging import setup_logging
from freee_notifier.notifier import BroadcastResult, DailyReportNotifier


async def run_daily_report() -> BroadcastResult:
    """Push the daily report to all registered users"""
    notifier = DailyReportNotifier(
        LineClient(),
        load_receipt_required_items(settings.receipt_required_items_path),
    )
    db = SessionLocal()
    try:
        return await notifier.broadcast(UserRepository(db))
    finally:
        db.close()


def main() -> None:
    setup_logging(settings.log_level)
    result = asyncio.run(run_daily_report())
    if result.failed:
        logging.warning("Some daily reports were not delivered", extra={"failed": result.failed})


if __name__ == "__main__":
    main()
