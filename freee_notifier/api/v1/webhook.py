"""POST /webhook - LINE Messaging API webhook"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from freee_notifier.api.dependencies import get_line_client, get_notifier, get_request_id
from freee_notifier.api.v1.schemas import WebhookEvent, WebhookRequest
from freee_notifier.config import settings
from freee_notifier.domain.exceptions import NotLinkedError
from freee_notifier.infrastructure.clients.line import LineClient
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.infrastructure.database.session import get_db
from freee_notifier.messaging.templates import (
    TAX_FILING_CHECKLIST,
    account_settings_message,
    menu_message,
    not_linked_message,
    tax_rate_table_text,
    text_message,
)
from freee_notifier.notifier import DailyReportNotifier

router = APIRouter()
logger = logging.getLogger(__name__)

Task = Callable[[], Awaitable[Any]]

CMD_ACCOUNT_SETTINGS = "アカウント設定"
CMD_MENU = "メニュー"
CMD_DAILY_REPORT = ("デイリーレポート", "テスト")
CMD_RECEIPTS = "領収書"
CMD_TAX_RATE_TABLE = "税率表"
CMD_TAX_FILING_CHECKLIST = "確定申告チェックリスト"
CMD_UNLINK = "アカウント連携解除"


def _reply(line_client: LineClient, event: WebhookEvent, messages: List[Dict[str, Any]]) -> Task:
    return lambda: line_client.reply_message(event.reply_token, messages)


def dispatch_command(
    event: WebhookEvent,
    repository: UserRepository,
    line_client: LineClient,
    notifier: DailyReportNotifier,
) -> Optional[Task]:
    """
    Map a text message to the work it triggers.

    Database reads and writes happen here, inside the request. Network calls
    are returned as a task to run after the response is sent.
    """
    if event.type != "message" or event.message is None or event.message.type != "text":
        return None

    command = event.message.text
    line_user_id = event.source.user_id
    not_linked = [not_linked_message(settings.line_liff_auth_url)]

    if command == CMD_ACCOUNT_SETTINGS:
        linked = line_user_id is not None and repository.get_by_line_user_id(line_user_id) is not None
        return _reply(line_client, event, [account_settings_message(linked, settings.line_liff_auth_url)])

    if command == CMD_MENU:
        if not line_user_id:
            return _reply(line_client, event, not_linked)
        return _reply(line_client, event, [menu_message()])

    if command == CMD_TAX_RATE_TABLE:
        return _reply(line_client, event, [text_message(tax_rate_table_text())])

    if command == CMD_TAX_FILING_CHECKLIST:
        return _reply(line_client, event, [text_message(TAX_FILING_CHECKLIST)])

    if command in CMD_DAILY_REPORT or command == CMD_RECEIPTS:
        if not line_user_id:
            logger.error("Webhook event without a LINE user id", extra={"command": command})
            return None
        try:
            company = repository.get_company_ref(line_user_id)
        except NotLinkedError:
            return _reply(line_client, event, not_linked)

        if command == CMD_RECEIPTS:
            return lambda: notifier.send_receipt_list(line_user_id, company)
        return lambda: notifier.send_daily_report(line_user_id, company)

    if command == CMD_UNLINK:
        if not line_user_id:
            return _reply(line_client, event, not_linked)
        repository.delete_user(line_user_id)
        return _reply(line_client, event, [text_message("アカウント連携を解除しました")])

    return None


async def run_task(task: Task, request_id: str) -> None:
    """Background runner; a failed command is logged, the user gets no message"""
    try:
        await task()
    except Exception as e:
        logger.error(f"Webhook command failed: {e}", extra={"request_id": request_id}, exc_info=True)


@router.post("/webhook")
async def line_webhook(
    body: WebhookRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    line_client: LineClient = Depends(get_line_client),
    notifier: DailyReportNotifier = Depends(get_notifier),
):
    """
    Receive LINE events and answer text commands.

    Flow:
    1. Resolve each text command against the user's linked company
    2. Commit database changes (account unlink)
    3. Reply / push in background tasks after acknowledging LINE
    """
    request_id = get_request_id(request)
    repository = UserRepository(db)

    tasks = []
    for event in body.events:
        task = dispatch_command(event, repository, line_client, notifier)
        if task is not None:
            tasks.append(task)
    db.commit()

    for task in tasks:
        background_tasks.add_task(run_task, task, request_id)

    return {"message": "success"}
