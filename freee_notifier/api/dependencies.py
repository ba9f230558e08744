"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache
from typing import List, Optional
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from freee_notifier.config import settings
from freee_notifier.domain.exceptions import LineAPIError
from freee_notifier.domain.models import AccountItem
from freee_notifier.domain.receipts import load_receipt_required_items
from freee_notifier.infrastructure.clients.line import LineClient
from freee_notifier.notifier import DailyReportNotifier

line_bearer = HTTPBearer(auto_error=False, description="LINE Login / LIFF access token")


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_receipt_required_items() -> List[AccountItem]:
    """Allow-list loaded once per process"""
    return load_receipt_required_items(settings.receipt_required_items_path)


def get_line_client() -> LineClient:
    """Provide LINE Messaging API client instance"""
    return LineClient()


async def get_current_line_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(line_bearer),
    line_client: LineClient = Depends(get_line_client),
) -> str:
    """
    LINE user id of the caller, resolved from their access token.

    Raises:
        HTTPException: 401 when the token is missing or LINE rejects it
    """
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="LINE access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await line_client.get_profile(credentials.credentials)
    except LineAPIError:
        raise HTTPException(
            status_code=401,
            detail="Invalid LINE access token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_notifier(
    line_client: LineClient = Depends(get_line_client),
    required_items: List[AccountItem] = Depends(get_receipt_required_items),
) -> DailyReportNotifier:
    """Provide report notifier bound to the LINE client"""
    return DailyReportNotifier(line_client, required_items)
