"""GET /v1/receipts - Deals that still need a receipt"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from freee_notifier.api.dependencies import get_current_line_user_id, get_notifier, get_request_id
from freee_notifier.api.v1.schemas import FlaggedDealSchema, PaginationSchema, ReceiptsResponse
from freee_notifier.domain.exceptions import FreeeAPIError, NotLinkedError
from freee_notifier.domain.receipts import paginate
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.infrastructure.database.session import get_db
from freee_notifier.notifier import DailyReportNotifier

router = APIRouter()


@router.get("/receipts", response_model=ReceiptsResponse)
async def list_receipts(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    notifier: DailyReportNotifier = Depends(get_notifier),
    line_user_id: str = Depends(get_current_line_user_id),
):
    """
    List the caller's flagged deals with matching wallet transaction descriptions.

    The caller is identified by the LINE access token in the Authorization
    header (LIFF app).

    Returns:
        One page of deals plus pagination metadata
    """
    request_id = get_request_id(request)

    try:
        company = UserRepository(db).get_company_ref(line_user_id)
    except NotLinkedError:
        raise HTTPException(status_code=401, detail="事業所が見つかりませんでした")

    try:
        deals = await notifier.flagged_deals(company)
    except FreeeAPIError as e:
        logging.error(f"freee API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="freee service unavailable")

    page_deals, total_count, total_pages = paginate(deals, page, limit)

    return ReceiptsResponse(
        deals=[
            FlaggedDealSchema(
                id=deal.id,
                date=deal.date,
                url=deal.url,
                amount=deal.amount,
                account_item_names=deal.account_item_names,
                payment_descriptions=deal.payment_descriptions,
            )
            for deal in page_deals
        ],
        pagination=PaginationSchema(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
        ),
    )
