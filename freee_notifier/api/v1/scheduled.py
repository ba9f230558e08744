"""POST /v1/scheduled/daily-report - Trigger the daily report broadcast"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from freee_notifier.api.dependencies import get_notifier
from freee_notifier.api.v1.schemas import ScheduledResponse
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.infrastructure.database.session import get_db
from freee_notifier.notifier import DailyReportNotifier

router = APIRouter()


@router.post("/scheduled/daily-report", response_model=ScheduledResponse, status_code=202)
def trigger_daily_report(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: DailyReportNotifier = Depends(get_notifier),
):
    """
    Broadcast the daily report to every linked user.

    Recipients are resolved now; generation and delivery run after the
    response, one independent task per recipient.
    """
    recipients, skipped = notifier.collect_recipients(UserRepository(db))
    background_tasks.add_task(notifier.deliver_all, recipients)
    return ScheduledResponse(recipients=len(recipients), skipped=len(skipped))
