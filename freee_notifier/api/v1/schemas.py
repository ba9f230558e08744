"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
import datetime
from typing import List, Optional


class EventSource(BaseModel):
    """Sender of a LINE webhook event"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = "user"
    user_id: Optional[str] = Field(None, alias="userId")


class EventMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    text: Optional[str] = None


class WebhookEvent(BaseModel):
    """Single LINE webhook event (only text messages are acted on)"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    reply_token: Optional[str] = Field(None, alias="replyToken")
    source: EventSource = Field(default_factory=EventSource)
    message: Optional[EventMessage] = None


class WebhookRequest(BaseModel):
    """Request body for POST /webhook"""

    model_config = ConfigDict(extra="ignore")

    destination: Optional[str] = None
    events: List[WebhookEvent] = Field(default_factory=list)


class FlaggedDealSchema(BaseModel):
    """Deal missing a required receipt"""

    id: int
    date: datetime.date
    url: str
    amount: int
    account_item_names: List[str]
    payment_descriptions: List[str]


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class ReceiptsResponse(BaseModel):
    """Response for GET /v1/receipts"""

    deals: List[FlaggedDealSchema]
    pagination: PaginationSchema


class ScheduledResponse(BaseModel):
    """Response for POST /v1/scheduled/daily-report"""

    status: str = "accepted"
    recipients: int
    skipped: int
