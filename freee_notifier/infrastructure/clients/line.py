"""LINE Messaging API client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
import uuid
from typing import Any, Dict, List
from freee_notifier.config import settings
from freee_notifier.domain.exceptions import LineAPIError
from freee_notifier.infrastructure.observability.metrics import line_push_latency_histogram, line_failure_counter

logger = logging.getLogger(__name__)

RETRY_KEY_HEADER = "X-Line-Retry-Key"


class LineClient:
    """Client for pushing and replying to LINE users"""

    def __init__(
        self,
        channel_access_token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.channel_access_token = channel_access_token or settings.line_channel_access_token
        self.base_url = (base_url or settings.line_api_base).rstrip("/")
        self.max_retries = settings.line_max_retries
        self.backoff_base = settings.line_backoff_base
        self.timeout = settings.http_timeout_seconds
        self._transport = transport

    def _client(self, access_token: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def push_message(self, to: str, messages: List[Dict[str, Any]]) -> None:
        """
        Send messages to a user outside of a reply context.

        Every attempt carries the same retry key, so LINE delivers the
        messages at most once even when a response is lost.
        """
        await self._post(
            "/v2/bot/message/push",
            {"to": to, "messages": messages},
            retry_key=str(uuid.uuid4()),
        )

    async def reply_message(self, reply_token: str, messages: List[Dict[str, Any]]) -> None:
        """Answer a webhook event; reply tokens are single-use, so no retry"""
        await self._post(
            "/v2/bot/message/reply",
            {"replyToken": reply_token, "messages": messages},
            max_attempts=1,
        )

    async def get_profile(self, user_access_token: str) -> str:
        """
        Resolve a LINE Login / LIFF access token to the user's id.

        Raises:
            LineAPIError: Token rejected, LINE unreachable, or no userId returned
        """
        async with self._client(user_access_token) as client:
            try:
                response = await client.get("/v2/profile")
                response.raise_for_status()
                user_id = response.json().get("userId")
            except httpx.HTTPStatusError as e:
                raise LineAPIError(f"LINE profile lookup rejected: {e.response.status_code}") from e
            except (httpx.RequestError, ValueError, AttributeError) as e:
                raise LineAPIError(f"LINE profile lookup failed: {e}") from e

        if not user_id:
            raise LineAPIError("LINE profile response has no userId")
        return user_id

    async def _post(
        self,
        path: str,
        payload: Dict[str, Any],
        retry_key: str | None = None,
        max_attempts: int | None = None,
    ) -> None:
        """
        POST to the Messaging API with retry logic.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1)
        - Retries on 5xx errors and network failures
        - 4xx errors are not retried and raise LineAPIError immediately
        - 409 on a retried request with a retry key means the first attempt
          was accepted, which counts as success
        - Tracks latency histogram and failure counter
        """
        max_attempts = max_attempts or self.max_retries
        headers = {RETRY_KEY_HEADER: retry_key} if retry_key else None
        attempt = 0
        async with self._client(self.channel_access_token) as client:
            while True:
                try:
                    with line_push_latency_histogram.time():
                        response = await client.post(path, json=payload, headers=headers)
                        response.raise_for_status()
                        return  # Success

                except httpx.HTTPStatusError as e:
                    status = e.response.status_code
                    if status == 409 and retry_key and attempt > 0:
                        logger.info(
                            "LINE already accepted this request",
                            extra={"path": path, "attempt": attempt + 1},
                        )
                        return
                    line_failure_counter.inc()
                    if status < 500:
                        raise LineAPIError(f"LINE API rejected {path}: {status} {e.response.text}") from e
                    error: Exception = e

                except httpx.RequestError as e:
                    line_failure_counter.inc()
                    error = e

                attempt += 1
                if attempt >= max_attempts:
                    # Final failure after all retries
                    raise LineAPIError(f"LINE API failed after {attempt} attempts: {error}") from error

                backoff = self.backoff_base * (2 ** (attempt - 1))
                logger.warning(
                    "LINE API call failed, retrying",
                    extra={"path": path, "attempt": attempt, "backoff_seconds": backoff},
                )
                await asyncio.sleep(backoff)
