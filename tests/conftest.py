"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable, Generator, List, Optional
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from freee_notifier.api.main import create_app
from freee_notifier.api.dependencies import get_line_client
from freee_notifier.infrastructure.clients.line import LineClient
from freee_notifier.infrastructure.database.models import Base
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.infrastructure.database.session import get_db
from freee_notifier.domain.models import (
    BalanceLine,
    CompleteSnapshot,
    Deal,
    DealDetail,
    Payment,
    TrialBalanceSnapshot,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def line_client() -> AsyncMock:
    """LINE client that records calls instead of sending"""
    return AsyncMock(spec=LineClient)


@pytest.fixture
def client(db: Session, line_client: AsyncMock) -> TestClient:
    """Create FastAPI test client with test database and mocked LINE client"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_line_client] = lambda: line_client
    return TestClient(app)


@pytest.fixture
def linked_user(db: Session) -> str:
    """LINE user linked to freee company 1001"""
    UserRepository(db).link_company("U_linked", company_id=1001, access_token="token-1001")
    db.commit()
    return "U_linked"


@pytest.fixture
def snapshot() -> Callable[..., CompleteSnapshot]:
    """
    Build a complete trial balance from (category, item, total_line, amount) rows.

    Example: snapshot(("収入金額", None, True, 1000), fiscal_year=2026)
    """

    def build(*rows, fiscal_year: int = 2026, end_month: Optional[int] = None) -> CompleteSnapshot:
        lines = tuple(
            BalanceLine(
                account_category_name=category,
                account_item_name=item,
                total_line=total_line,
                closing_balance=amount,
            )
            for category, item, total_line, amount in rows
        )
        return CompleteSnapshot(TrialBalanceSnapshot(fiscal_year=fiscal_year, end_month=end_month, lines=lines))

    return build


@pytest.fixture
def make_deal() -> Callable[..., Deal]:
    def build(
        deal_id: int,
        account_item_ids: List[int],
        receipt_ids: Optional[List[int]] = None,
        amount: int = 1000,
        issue_date: date = date(2026, 10, 1),
        payments: Optional[List[Payment]] = None,
    ) -> Deal:
        return Deal(
            id=deal_id,
            issue_date=issue_date,
            amount=amount,
            details=[DealDetail(account_item_id=item_id) for item_id in account_item_ids],
            receipt_ids=receipt_ids or [],
            payments=payments or [],
        )

    return build
