"""freee accounting API HTTP client for trial balances, deals and wallet transactions"""

import httpx
from datetime import date
from typing import Any, Dict, List
from freee_notifier.domain.models import Deal, DealDetail, Payment, SnapshotResult, WalletTransaction
from freee_notifier.domain.exceptions import FreeeAPIError, PeriodNotFoundError
from freee_notifier.domain.trial_balance import parse_trial_balance
from freee_notifier.infrastructure.observability.metrics import freee_fetch_failures_counter
from freee_notifier.config import settings


class FreeeClient:
    """Client for the freee accounting API, scoped to one access token"""

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token
        self.base_url = (base_url or settings.freee_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.access_token}"},
            transport=self._transport,
        )

    async def _get(self, resource: str, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        async with self._client() as client:
            try:
                response = await client.get(path, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                freee_fetch_failures_counter.labels(resource=resource).inc()
                raise FreeeAPIError(f"freee API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError:
                freee_fetch_failures_counter.labels(resource=resource).inc()
                raise
            except httpx.RequestError as e:
                freee_fetch_failures_counter.labels(resource=resource).inc()
                raise FreeeAPIError(f"freee API request failed: {e}") from e
            except ValueError as e:
                freee_fetch_failures_counter.labels(resource=resource).inc()
                raise FreeeAPIError(f"Invalid JSON from freee: {e}") from e

        if not isinstance(data, dict):
            raise FreeeAPIError(f"Invalid {resource} data from freee: expected a JSON object")
        return data

    async def get_trial_balance(
        self,
        company_id: int,
        fiscal_year: int,
        end_month: int | None = None,
    ) -> SnapshotResult:
        """
        Fetch the P&L trial balance for a fiscal year (optionally up to end_month).

        Raises:
            PeriodNotFoundError: freee answered 400, the fiscal year does not exist
            FreeeAPIError: On timeout, other HTTP errors, or invalid response
        """
        params: Dict[str, Any] = {"company_id": company_id, "fiscal_year": fiscal_year}
        if end_month is not None:
            params["end_month"] = end_month

        try:
            data = await self._get("trial_pl", "/api/1/reports/trial_pl", params)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 400:
                raise PeriodNotFoundError(company_id, fiscal_year, end_month) from e
            raise FreeeAPIError(f"freee API error: {e.response.status_code}") from e

        return parse_trial_balance(data, fiscal_year, end_month)

    async def get_deals(self, company_id: int, limit: int | None = None) -> List[Deal]:
        """
        Fetch recent deals for a company.

        Raises:
            FreeeAPIError: On timeout, HTTP errors, or invalid response
        """
        try:
            data = await self._get(
                "deals",
                "/api/1/deals",
                {"company_id": company_id, "limit": limit or settings.deals_limit},
            )
        except httpx.HTTPStatusError as e:
            raise FreeeAPIError(f"freee API error: {e.response.status_code}") from e

        try:
            return [
                Deal(
                    id=deal["id"],
                    issue_date=date.fromisoformat(deal["issue_date"]),
                    amount=deal["amount"],
                    details=[
                        DealDetail(account_item_id=detail["account_item_id"])
                        for detail in deal.get("details") or []
                    ],
                    receipt_ids=[receipt["id"] for receipt in deal.get("receipts") or []],
                    payments=[
                        Payment(
                            date=date.fromisoformat(payment["date"]),
                            amount=payment["amount"],
                            from_walletable_id=payment.get("from_walletable_id"),
                        )
                        for payment in deal.get("payments") or []
                    ],
                )
                for deal in data.get("deals", [])
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise FreeeAPIError(f"Invalid deal data from freee: {e}") from e

    async def get_wallet_txns(self, company_id: int, limit: int | None = None) -> List[WalletTransaction]:
        """
        Fetch wallet transactions (bank and card statement lines).

        Raises:
            FreeeAPIError: On timeout, HTTP errors, or invalid response
        """
        try:
            data = await self._get(
                "wallet_txns",
                "/api/1/wallet_txns",
                {"company_id": company_id, "limit": limit or settings.deals_limit},
            )
        except httpx.HTTPStatusError as e:
            raise FreeeAPIError(f"freee API error: {e.response.status_code}") from e

        try:
            return [
                WalletTransaction(
                    date=date.fromisoformat(txn["date"]),
                    amount=txn["amount"],
                    walletable_id=txn["walletable_id"],
                    description=txn.get("description") or "",
                )
                for txn in data.get("wallet_txns", [])
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise FreeeAPIError(f"Invalid wallet transaction data from freee: {e}") from e
