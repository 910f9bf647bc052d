"""
Async client for the Shopfloor Hub REST API.

Handles:
- Bearer authentication and response parsing into the shared schemas
- Retries with backoff for rate limits (429) and dropped connections
- Mapping transport and HTTP failures onto APIError subclasses
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

import httpx
import structlog

from shopfloor_shared.schemas.common import ErrorResponse
from shopfloor_shared.schemas.notifications import (
    NotificationListResponse,
    NotificationRead,
    UnreadCount,
)
from shopfloor_shared.schemas.rush_orders import (
    ReadReceipt,
    RushOrderMessageListResponse,
    RushOrderMessageRead,
    UnreadMessagesCount,
)

log = structlog.get_logger()

# Retry configuration
MAX_RETRIES = 3
RETRY_BASE_SECONDS = 1.0


class APIError(Exception):
    """A call to the API failed."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
        retriable: bool = False,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.retriable = retriable


class APIUnavailable(APIError):
    """Transport failure or 5xx: worth trying again later."""


class APIRequestError(APIError):
    """The API rejected the request (4xx)."""


def _error_from_response(resp: httpx.Response) -> APIError:
    try:
        error = ErrorResponse.model_validate(resp.json()).error
    except ValueError:
        # Not our envelope (a proxy page, an empty body).
        error = None
    message = error.message if error else f"HTTP {resp.status_code}"
    code = error.code if error else None
    if resp.status_code >= 500:
        return APIUnavailable(message, status=resp.status_code, code=code, retriable=True)
    return APIRequestError(
        message,
        status=resp.status_code,
        code=code,
        retriable=error.retriable if error else False,
    )


class ShopfloorAPI:
    """
    Thin wrapper over the Shopfloor Hub endpoints used by the polling controllers.

    Thread routes act as the token's employee, so they take no employee id.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        verify_tls: bool = True,
        request_timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._verify_tls = verify_tls
        self._request_timeout = request_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def open(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api/v1",
            timeout=httpx.Timeout(self._request_timeout),
            verify=self._verify_tls,
            headers={"Authorization": f"Bearer {self._token}"},
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ShopfloorAPI":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        retry: bool = True,
    ) -> Any:
        if self._client is None:
            raise RuntimeError("ShopfloorAPI is not open")

        attempts = MAX_RETRIES if retry else 1
        last_exc: APIError | None = None
        for attempt in range(attempts):
            try:
                resp = await self._client.request(method, path, json=json)
            except httpx.TransportError as exc:
                last_exc = APIUnavailable(f"{method} {path} failed: {exc}", retriable=True)
            else:
                if resp.status_code == 429:
                    retry_after = float(
                        resp.headers.get("Retry-After", RETRY_BASE_SECONDS * (attempt + 1))
                    )
                    last_exc = _error_from_response(resp)
                    if attempt + 1 < attempts:
                        log.warning("api.rate_limited", path=path, retry_after=retry_after)
                        await asyncio.sleep(retry_after)
                    continue
                if resp.is_error:
                    error = _error_from_response(resp)
                    log.warning(
                        "api.request_failed",
                        method=method,
                        path=path,
                        status=resp.status_code,
                        code=error.code,
                    )
                    raise error
                return resp.json() if resp.content else None

            if attempt + 1 < attempts:
                backoff = RETRY_BASE_SECONDS * (2 ** attempt)
                log.warning(
                    "api.retry",
                    attempt=attempt + 1,
                    backoff=backoff,
                    error=str(last_exc),
                )
                await asyncio.sleep(backoff)

        assert last_exc is not None
        raise last_exc

    # --- Notifications ---

    async def get_user_notifications(self, user_id: uuid.UUID) -> list[NotificationRead]:
        body = await self._request("GET", f"/users/{user_id}/notifications")
        return NotificationListResponse.model_validate(body).data

    async def get_unread_count(self, user_id: uuid.UUID) -> int:
        body = await self._request("GET", f"/users/{user_id}/notifications/unread-count")
        return UnreadCount.model_validate(body).count

    async def mark_as_read(self, notification_id: uuid.UUID) -> None:
        await self._request("POST", f"/notifications/{notification_id}/read")

    async def mark_all_as_read(self, user_id: uuid.UUID) -> None:
        await self._request("POST", f"/users/{user_id}/notifications/read-all")

    # --- Rush-order threads ---

    async def get_rush_order_messages(self, rush_order_id: uuid.UUID) -> list[RushOrderMessageRead]:
        body = await self._request("GET", f"/rush-orders/{rush_order_id}/messages")
        return RushOrderMessageListResponse.model_validate(body).data

    async def add_rush_order_message(
        self, rush_order_id: uuid.UUID, message: str
    ) -> RushOrderMessageRead:
        # Not idempotent: a retry after a lost response could post twice.
        body = await self._request(
            "POST",
            f"/rush-orders/{rush_order_id}/messages",
            json={"message": message},
            retry=False,
        )
        return RushOrderMessageRead.model_validate(body)

    async def mark_messages_as_read(self, rush_order_id: uuid.UUID) -> ReadReceipt:
        body = await self._request("POST", f"/rush-orders/{rush_order_id}/messages/read")
        return ReadReceipt.model_validate(body)

    async def get_unread_messages_count(self, rush_order_id: uuid.UUID) -> int:
        """Unread messages in a thread for the caller. Badge only: failures read as 0."""
        try:
            body = await self._request("GET", f"/rush-orders/{rush_order_id}/messages/unread-count")
        except APIError as exc:
            log.warning("api.unread_count_failed", rush_order_id=str(rush_order_id), error=str(exc))
            return 0
        return UnreadMessagesCount.model_validate(body).count

    # --- Health ---

    async def check_health(self) -> bool:
        if not self._client:
            return False
        try:
            resp = await self._client.get(f"{self._base_url}/health")
            return resp.status_code == 200
        except httpx.TransportError:
            return False
