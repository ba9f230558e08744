"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, patch
from datetime import date
from fastapi.testclient import TestClient
from freee_notifier.domain.exceptions import FreeeAPIError, LineAPIError
from freee_notifier.domain.models import CompanyRef, FlaggedDeal
from freee_notifier.infrastructure.database.models import User
from freee_notifier.infrastructure.database.repositories import UserRepository
from freee_notifier.notifier import BroadcastResult


def text_event(text: str, user_id: str | None = "U_linked") -> dict:
    source = {"type": "user"}
    if user_id is not None:
        source["userId"] = user_id
    return {
        "type": "message",
        "replyToken": "reply-token",
        "source": source,
        "message": {"type": "text", "id": "1", "text": text},
    }


def post_events(client: TestClient, *events: dict):
    return client.post("/webhook", json={"destination": "bot", "events": list(events)})


@pytest.fixture
def flagged_deals():
    return [
        FlaggedDeal(
            id=deal_id,
            date=date(2026, 10, deal_id),
            url=f"https://secure.freee.co.jp/reports/journals?deal_id={deal_id}&openExternalBrowser=1",
            amount=1000 * deal_id,
            account_item_names=["通信費"],
            payment_descriptions=["NTT"] if deal_id == 1 else [],
        )
        for deal_id in range(1, 6)
    ]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "freee-notifier"}


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "freee_notifier_reports_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_webhook_tax_rate_table(client: TestClient, line_client: AsyncMock):
    response = post_events(client, text_event("税率表"))

    assert response.status_code == 200
    assert response.json() == {"message": "success"}
    reply_token, messages = line_client.reply_message.await_args.args
    assert reply_token == "reply-token"
    assert messages[0]["type"] == "text"
    assert messages[0]["text"].startswith("【所得税の税率表】")


def test_webhook_tax_filing_checklist(client: TestClient, line_client: AsyncMock):
    post_events(client, text_event("確定申告チェックリスト"))

    messages = line_client.reply_message.await_args.args[1]
    assert messages[0]["text"].startswith("【確定申告チェックリスト】")


def test_webhook_menu(client: TestClient, line_client: AsyncMock):
    post_events(client, text_event("メニュー"))

    messages = line_client.reply_message.await_args.args[1]
    assert messages[0]["template"]["text"] == "メニュー"


def test_webhook_account_settings_linked(client: TestClient, line_client: AsyncMock, linked_user: str):
    post_events(client, text_event("アカウント設定", user_id=linked_user))

    action = line_client.reply_message.await_args.args[1][0]["template"]["actions"][0]
    assert action["text"] == "アカウント連携解除"


def test_webhook_account_settings_unlinked(client: TestClient, line_client: AsyncMock):
    post_events(client, text_event("アカウント設定", user_id="U_new"))

    action = line_client.reply_message.await_args.args[1][0]["template"]["actions"][0]
    assert action["type"] == "uri"


def test_webhook_daily_report_not_linked(client: TestClient, line_client: AsyncMock):
    post_events(client, text_event("デイリーレポート", user_id="U_new"))

    message = line_client.reply_message.await_args.args[1][0]
    assert message["altText"] == "アカウント連携されていません"
    line_client.push_message.assert_not_awaited()


@patch("freee_notifier.notifier.DailyReportNotifier.send_daily_report")
def test_webhook_daily_report_linked(mock_send: AsyncMock, client: TestClient, line_client: AsyncMock, linked_user: str):
    post_events(client, text_event("デイリーレポート", user_id=linked_user))

    mock_send.assert_awaited_once_with(linked_user, CompanyRef(company_id=1001, access_token="token-1001"))
    line_client.reply_message.assert_not_awaited()


@patch("freee_notifier.notifier.DailyReportNotifier.send_receipt_list")
def test_webhook_receipts_linked(mock_send: AsyncMock, client: TestClient, linked_user: str):
    post_events(client, text_event("領収書", user_id=linked_user))

    mock_send.assert_awaited_once_with(linked_user, CompanyRef(company_id=1001, access_token="token-1001"))


@patch("freee_notifier.notifier.DailyReportNotifier.send_daily_report")
def test_webhook_command_failure_still_acknowledged(mock_send: AsyncMock, client: TestClient, linked_user: str):
    mock_send.side_effect = FreeeAPIError("freee API error: 503")

    response = post_events(client, text_event("テスト", user_id=linked_user))

    assert response.status_code == 200
    mock_send.assert_awaited_once()


def test_webhook_unlink_deletes_user(client: TestClient, line_client: AsyncMock, db, linked_user: str):
    post_events(client, text_event("アカウント連携解除", user_id=linked_user))

    assert UserRepository(db).get_by_line_user_id(linked_user) is None
    assert line_client.reply_message.await_args.args[1][0]["text"] == "アカウント連携を解除しました"


def test_webhook_ignores_other_events(client: TestClient, line_client: AsyncMock):
    response = post_events(
        client,
        {"type": "follow", "replyToken": "t", "source": {"type": "user", "userId": "U1"}},
        {"type": "message", "replyToken": "t", "source": {"userId": "U1"}, "message": {"type": "sticker"}},
        text_event("こんにちは"),
    )

    assert response.status_code == 200
    line_client.reply_message.assert_not_awaited()


def test_webhook_empty_events(client: TestClient):
    response = client.post("/webhook", json={"destination": "bot", "events": []})
    assert response.status_code == 200


@pytest.fixture
def auth_headers(line_client: AsyncMock):
    """Authorization header for a LIFF caller; LINE resolves it to the given user"""

    def build(line_user_id: str) -> dict:
        line_client.get_profile.return_value = line_user_id
        return {"Authorization": "Bearer liff-access-token"}

    return build


def test_receipts_requires_access_token(client: TestClient, line_client: AsyncMock, linked_user: str):
    response = client.get("/v1/receipts", params={"line_user_id": linked_user})

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    line_client.get_profile.assert_not_awaited()


def test_receipts_rejected_access_token(client: TestClient, line_client: AsyncMock, linked_user: str):
    line_client.get_profile.side_effect = LineAPIError("LINE profile lookup rejected: 401")

    response = client.get("/v1/receipts", headers={"Authorization": "Bearer expired"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid LINE access token"
    line_client.get_profile.assert_awaited_once_with("expired")


def test_receipts_not_linked(client: TestClient, auth_headers):
    response = client.get("/v1/receipts", headers=auth_headers("U_new"))

    assert response.status_code == 401
    assert response.json()["detail"] == "事業所が見つかりませんでした"


@patch("freee_notifier.notifier.DailyReportNotifier.flagged_deals")
def test_receipts_paginated(mock_deals: AsyncMock, client: TestClient, linked_user: str, flagged_deals, auth_headers):
    mock_deals.return_value = flagged_deals

    response = client.get("/v1/receipts", params={"page": 2, "limit": 2}, headers=auth_headers(linked_user))

    assert response.status_code == 200
    data = response.json()
    assert [deal["id"] for deal in data["deals"]] == [3, 4]
    assert data["deals"][0]["date"] == "2026-10-03"
    assert data["pagination"] == {"page": 2, "limit": 2, "total_count": 5, "total_pages": 3}
    mock_deals.assert_awaited_once_with(CompanyRef(company_id=1001, access_token="token-1001"))


@patch("freee_notifier.notifier.DailyReportNotifier.flagged_deals")
def test_receipts_first_page_carries_descriptions(
    mock_deals: AsyncMock, client: TestClient, linked_user: str, flagged_deals, auth_headers
):
    mock_deals.return_value = flagged_deals

    data = client.get("/v1/receipts", headers=auth_headers(linked_user)).json()

    assert len(data["deals"]) == 5
    assert data["deals"][0]["payment_descriptions"] == ["NTT"]
    assert data["pagination"]["total_pages"] == 1


@patch("freee_notifier.notifier.DailyReportNotifier.flagged_deals")
def test_receipts_freee_unavailable(mock_deals: AsyncMock, client: TestClient, linked_user: str, auth_headers):
    mock_deals.side_effect = FreeeAPIError("freee API timeout after 10.0s")

    response = client.get("/v1/receipts", headers=auth_headers(linked_user))

    assert response.status_code == 503


@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}, {"page": "first"}])
def test_receipts_validation(client: TestClient, linked_user: str, auth_headers, params):
    response = client.get("/v1/receipts", params=params, headers=auth_headers(linked_user))

    assert response.status_code == 422


@patch("freee_notifier.notifier.DailyReportNotifier.deliver_all")
def test_scheduled_daily_report(mock_deliver: AsyncMock, client: TestClient, db, linked_user: str):
    db.add(User(line_user_id="U_unlinked"))
    db.commit()
    mock_deliver.return_value = BroadcastResult(delivered=[linked_user])

    response = client.post("/v1/scheduled/daily-report")

    assert response.status_code == 202
    assert response.json() == {"status": "accepted", "recipients": 1, "skipped": 1}
    recipients = mock_deliver.await_args.args[0]
    assert recipients == [(linked_user, CompanyRef(company_id=1001, access_token="token-1001"))]
