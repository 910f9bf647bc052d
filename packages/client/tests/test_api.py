"""Tests for the HTTP API wrapper against an httpx.MockTransport."""

from __future__ import annotations

import uuid

import httpx
import pytest

from shopfloor_client import api as api_module
from shopfloor_client.api import APIRequestError, APIUnavailable, ShopfloorAPI

USER_ID = uuid.uuid4()
RUSH_ORDER_ID = uuid.uuid4()


def _notification_json(read=False):
    return {
        "id": str(uuid.uuid4()),
        "user_id": str(USER_ID),
        "message": "New rush order: Hinges",
        "read": read,
        "rush_order_id": str(RUSH_ORDER_ID),
        "created_at": "2026-03-02T08:00:00Z",
    }


def _error(status, code, retriable=False):
    return httpx.Response(
        status,
        json={
            "error": {
                "code": code,
                "message": f"{code} happened",
                "status": status,
                "retriable": retriable,
                "request_id": "r1",
            }
        },
    )


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(api_module, "RETRY_BASE_SECONDS", 0.0)


def make_api(handler) -> ShopfloorAPI:
    return ShopfloorAPI("http://hub.test/", "tok-123", transport=httpx.MockTransport(handler))


async def test_get_user_notifications_parses_and_authenticates():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": [_notification_json(), _notification_json(True)]})

    async with make_api(handler) as api:
        items = await api.get_user_notifications(USER_ID)

    assert [n.read for n in items] == [False, True]
    assert items[0].rush_order_id == RUSH_ORDER_ID
    assert seen[0].url.path == f"/api/v1/users/{USER_ID}/notifications"
    assert seen[0].headers["Authorization"] == "Bearer tok-123"


async def test_server_error_becomes_api_unavailable():
    def handler(request):
        return _error(503, "notifications_unavailable", retriable=True)

    async with make_api(handler) as api:
        with pytest.raises(APIUnavailable) as exc_info:
            await api.get_user_notifications(USER_ID)

    assert exc_info.value.code == "notifications_unavailable"
    assert exc_info.value.status == 503
    assert exc_info.value.retriable


async def test_client_error_becomes_api_request_error():
    def handler(request):
        return _error(403, "http_403")

    async with make_api(handler) as api:
        with pytest.raises(APIRequestError) as exc_info:
            await api.mark_all_as_read(USER_ID)

    assert exc_info.value.status == 403
    assert not exc_info.value.retriable


async def test_rate_limit_is_retried():
    responses = [httpx.Response(429, headers={"Retry-After": "0"}), httpx.Response(204)]

    def handler(request):
        return responses.pop(0)

    async with make_api(handler) as api:
        await api.mark_as_read(uuid.uuid4())

    assert responses == []


async def test_connection_errors_retried_then_raised():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    async with make_api(handler) as api:
        with pytest.raises(APIUnavailable):
            await api.get_rush_order_messages(RUSH_ORDER_ID)

    assert len(attempts) == api_module.MAX_RETRIES


async def test_send_is_not_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ReadError("reset", request=request)

    async with make_api(handler) as api:
        with pytest.raises(APIUnavailable):
            await api.add_rush_order_message(RUSH_ORDER_ID, "hello")

    assert len(attempts) == 1


async def test_send_returns_persisted_row():
    def handler(request):
        assert request.method == "POST"
        assert request.url.path == f"/api/v1/rush-orders/{RUSH_ORDER_ID}/messages"
        return httpx.Response(
            201,
            json={
                "id": str(uuid.uuid4()),
                "rush_order_id": str(RUSH_ORDER_ID),
                "employee_id": str(USER_ID),
                "message": "hello",
                "created_at": "2026-03-02T08:00:00Z",
                "updated_at": "2026-03-02T08:00:00Z",
                "employee_name": "Alice",
                "employee_role": "worker",
            },
        )

    async with make_api(handler) as api:
        posted = await api.add_rush_order_message(RUSH_ORDER_ID, "hello")

    assert posted.employee_name == "Alice"


async def test_unread_messages_count_degrades_to_zero():
    def handler(request):
        return _error(500, "internal_error", retriable=True)

    async with make_api(handler) as api:
        assert await api.get_unread_messages_count(RUSH_ORDER_ID) == 0


async def test_unread_messages_count():
    def handler(request):
        return httpx.Response(200, json={"rush_order_id": str(RUSH_ORDER_ID), "count": 4})

    async with make_api(handler) as api:
        assert await api.get_unread_messages_count(RUSH_ORDER_ID) == 4


async def test_request_before_open_raises():
    api = ShopfloorAPI("http://hub.test", "tok")
    with pytest.raises(RuntimeError):
        await api.get_unread_count(USER_ID)


async def test_non_envelope_error_body_falls_back_to_status():
    def handler(request):
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    async with make_api(handler) as api:
        with pytest.raises(APIUnavailable) as exc_info:
            await api.mark_as_read(uuid.uuid4())

    assert str(exc_info.value) == "HTTP 502"
    assert exc_info.value.code is None


async def test_check_health_hits_server_root():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"status": "ok"})

    async with make_api(handler) as api:
        assert await api.check_health()

    assert seen == ["/health"]


async def test_check_health_false_when_unreachable():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with make_api(handler) as api:
        assert not await api.check_health()
