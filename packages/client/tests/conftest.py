"""
Shared fixtures for client tests: a scripted stand-in for ShopfloorAPI and
factories for the shared schema objects it returns.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import deque
from datetime import datetime, timedelta, timezone

import pytest

from shopfloor_client.api import APIUnavailable
from shopfloor_shared.schemas.notifications import NotificationRead
from shopfloor_shared.schemas.rush_orders import RushOrderMessageRead

T0 = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


class FakeAPI:
    """
    Records calls and replays scripted results.

    Each scripted entry is either a value to return, an exception to raise, or
    an asyncio.Event: the entry after it is claimed at once but only
    delivered once the event is set.
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.notification_results: deque = deque()
        self.message_results: deque = deque()
        self.fail_mark_read = False
        self.fail_mark_all = False
        self.fail_send = False
        self.sent: list[tuple[uuid.UUID, str]] = []

    async def _next(self, results: deque):
        item = results.popleft() if len(results) > 1 else results[0]
        if isinstance(item, asyncio.Event):
            gate, item = item, results.popleft()
            await gate.wait()
        if isinstance(item, Exception):
            raise item
        return item

    async def get_user_notifications(self, user_id):
        self.calls.append(("get_user_notifications", user_id))
        return await self._next(self.notification_results)

    async def mark_as_read(self, notification_id):
        self.calls.append(("mark_as_read", notification_id))
        if self.fail_mark_read:
            raise APIUnavailable("down")

    async def mark_all_as_read(self, user_id):
        self.calls.append(("mark_all_as_read", user_id))
        if self.fail_mark_all:
            raise APIUnavailable("down")

    async def get_rush_order_messages(self, rush_order_id):
        self.calls.append(("get_rush_order_messages", rush_order_id))
        return await self._next(self.message_results)

    async def add_rush_order_message(self, rush_order_id, message):
        self.calls.append(("add_rush_order_message", rush_order_id, message))
        if self.fail_send:
            raise APIUnavailable("down")
        self.sent.append((rush_order_id, message))

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


@pytest.fixture
def fake_api():
    return FakeAPI()


@pytest.fixture
def make_notification():
    def _make(message: str = "hello", read: bool = False, rush_order_id=None, offset: int = 0):
        return NotificationRead(
            id=uuid.uuid4(),
            user_id=uuid.uuid4(),
            message=message,
            read=read,
            rush_order_id=rush_order_id,
            created_at=T0 + timedelta(minutes=offset),
        )

    return _make


@pytest.fixture
def make_message():
    def _make(text: str = "hi", rush_order_id=None, name: str | None = "Alice", offset: int = 0):
        return RushOrderMessageRead(
            id=uuid.uuid4(),
            rush_order_id=rush_order_id or uuid.uuid4(),
            employee_id=uuid.uuid4(),
            message=text,
            created_at=T0 + timedelta(minutes=offset),
            updated_at=T0 + timedelta(minutes=offset),
            employee_name=name,
            employee_role="worker" if name else None,
        )

    return _make
