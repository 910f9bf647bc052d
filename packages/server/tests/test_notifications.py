"""
Tests for the notification service and endpoints.

Tests cover:
- Newest-first listing and the unread count
- Idempotent mark-read, including missing and foreign notifications
- Mark-all-read leaves every notification read
- All-or-nothing fan-out and broadcast to notifiable roles
- Store failures surface as 503, never as an empty list
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from app.models.base import utcnow
from app.models.notification import Notification
from app.services import notifications as notification_service
from shopfloor_shared.schemas.notifications import NotificationCreate


class FailingSession:
    """Stand-in session whose store is unreachable."""

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))


async def _seed(session_factory, user_id, *messages, read=False):
    base = utcnow()
    async with session_factory() as session:
        for i, message in enumerate(messages):
            session.add(
                Notification(
                    user_id=user_id,
                    message=message,
                    read=read,
                    created_at=base + timedelta(seconds=i),
                )
            )
        await session.commit()


# ---------------------------------------------------------------------------
# Service layer
# ---------------------------------------------------------------------------

class TestNotificationService:

    @pytest.mark.asyncio
    async def test_newest_first(self, session, session_factory, make_employee):
        ann = await make_employee("Ann")
        await _seed(session_factory, ann.id, "first", "second", "third")

        rows = await notification_service.get_user_notifications(session, ann.id)
        assert [n.message for n in rows] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_fetch_failure_is_503_not_empty(self):
        with pytest.raises(HTTPException) as exc_info:
            await notification_service.get_user_notifications(FailingSession(), uuid.uuid4())
        assert exc_info.value.status_code == 503
        assert exc_info.value.detail["code"] == "notifications_unavailable"

    @pytest.mark.asyncio
    async def test_mark_as_read_is_idempotent(self, session, make_employee):
        ann = await make_employee("Ann")
        created = await notification_service.create_notification(
            session, NotificationCreate(user_id=ann.id, message="hello")
        )
        await notification_service.mark_as_read(session, created.id)
        await notification_service.mark_as_read(session, created.id)
        await session.commit()

        assert await notification_service.get_unread_count(session, ann.id) == 0

    @pytest.mark.asyncio
    async def test_mark_missing_notification_is_noop(self, session):
        await notification_service.mark_as_read(session, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_mark_foreign_notification_is_noop(self, session, session_factory, make_employee):
        ann = await make_employee("Ann")
        bob = await make_employee("Bob")
        await _seed(session_factory, ann.id, "for ann")
        target = (await notification_service.get_user_notifications(session, ann.id))[0]

        await notification_service.mark_as_read(session, target.id, owner_id=bob.id)
        await session.commit()

        assert await notification_service.get_unread_count(session, ann.id) == 1

    @pytest.mark.asyncio
    async def test_mark_all_then_fetch_all_read(self, session, session_factory, make_employee):
        ann = await make_employee("Ann")
        await _seed(session_factory, ann.id, "a", "b", "c")
        await _seed(session_factory, ann.id, "old", read=True)

        changed = await notification_service.mark_all_as_read(session, ann.id)
        await session.commit()

        assert changed == 3
        rows = await notification_service.get_user_notifications(session, ann.id)
        assert len(rows) == 4
        assert all(n.read for n in rows)

    @pytest.mark.asyncio
    async def test_fan_out_one_row_per_distinct_recipient(self, session, make_employee):
        ann = await make_employee("Ann")
        bob = await make_employee("Bob")

        rows = await notification_service.create_notifications_for_users(
            session, [ann.id, bob.id, ann.id], "Line 3 stopped"
        )
        await session.commit()

        assert {n.user_id for n in rows} == {ann.id, bob.id}
        assert len(rows) == 2

    @pytest.mark.asyncio
    async def test_fan_out_with_unknown_recipient_inserts_nothing(self, session, make_employee):
        ann = await make_employee("Ann")

        with pytest.raises(HTTPException) as exc_info:
            await notification_service.create_notifications_for_users(
                session, [ann.id, uuid.uuid4()], "Line 3 stopped"
            )
        assert exc_info.value.status_code == 404

        total = (await session.execute(select(func.count()).select_from(Notification))).scalar_one()
        assert total == 0

    @pytest.mark.asyncio
    async def test_notify_all_users_skips_workstations(self, session, make_employee):
        admin = await make_employee("Ada", "admin")
        team = await make_employee("Ian", "installation_team")
        station = await make_employee("Saw 1", "workstation")

        rows = await notification_service.notify_all_users(session, "New rush order: X")
        recipients = {n.user_id for n in rows}

        assert admin.id in recipients
        assert team.id in recipients
        assert station.id not in recipients


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestNotificationEndpoints:

    @pytest.mark.asyncio
    async def test_list_own_notifications(self, client, session_factory, make_employee, auth_headers):
        ann = await make_employee("Ann")
        await _seed(session_factory, ann.id, "one", "two")

        resp = await client.get(f"/api/v1/users/{ann.id}/notifications", headers=auth_headers(ann))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [n["message"] for n in data] == ["two", "one"]
        assert data[0]["read"] is False

        resp = await client.get(
            f"/api/v1/users/{ann.id}/notifications/unread-count", headers=auth_headers(ann)
        )
        assert resp.json() == {"count": 2}

    @pytest.mark.asyncio
    async def test_worker_cannot_list_someone_else(self, client, make_employee, auth_headers):
        ann = await make_employee("Ann")
        bob = await make_employee("Bob")
        resp = await client.get(f"/api/v1/users/{ann.id}/notifications", headers=auth_headers(bob))
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_manager_can_list_anyone(self, client, make_employee, auth_headers):
        ann = await make_employee("Ann")
        boss = await make_employee("Boss", "manager")
        resp = await client.get(f"/api/v1/users/{ann.id}/notifications", headers=auth_headers(boss))
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_mark_read_endpoint(self, client, session_factory, make_employee, auth_headers):
        ann = await make_employee("Ann")
        await _seed(session_factory, ann.id, "one")
        listing = await client.get(f"/api/v1/users/{ann.id}/notifications", headers=auth_headers(ann))
        notification_id = listing.json()["data"][0]["id"]

        for _ in range(2):
            resp = await client.post(
                f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(ann)
            )
            assert resp.status_code == 204

        resp = await client.post(f"/api/v1/notifications/{uuid.uuid4()}/read", headers=auth_headers(ann))
        assert resp.status_code == 204

        count = await client.get(
            f"/api/v1/users/{ann.id}/notifications/unread-count", headers=auth_headers(ann)
        )
        assert count.json() == {"count": 0}

    @pytest.mark.asyncio
    async def test_read_all_endpoint(self, client, session_factory, make_employee, auth_headers):
        ann = await make_employee("Ann")
        await _seed(session_factory, ann.id, "a", "b", "c")

        resp = await client.post(f"/api/v1/users/{ann.id}/notifications/read-all", headers=auth_headers(ann))
        assert resp.status_code == 204

        listing = await client.get(f"/api/v1/users/{ann.id}/notifications", headers=auth_headers(ann))
        assert all(n["read"] for n in listing.json()["data"])

    @pytest.mark.asyncio
    async def test_unread_count_endpoint(self, client, session_factory, make_employee, auth_headers):
        ann = await make_employee("Ann")
        bob = await make_employee("Bob")
        await _seed(session_factory, ann.id, "a", "b")
        await _seed(session_factory, ann.id, "old", read=True)
        await _seed(session_factory, bob.id, "not ann's")

        resp = await client.get(
            f"/api/v1/users/{ann.id}/notifications/unread-count", headers=auth_headers(ann)
        )
        assert resp.status_code == 200
        assert resp.json() == {"count": 2}

        other = await client.get(
            f"/api/v1/users/{ann.id}/notifications/unread-count", headers=auth_headers(bob)
        )
        assert other.status_code == 403

    @pytest.mark.asyncio
    async def test_create_requires_supervisor(self, client, make_employee, auth_headers):
        ann = await make_employee("Ann")
        resp = await client.post(
            "/api/v1/notifications",
            json={"user_id": str(ann.id), "message": "hi"},
            headers=auth_headers(ann),
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_create_rejects_blank_message(self, client, make_employee, auth_headers):
        ann = await make_employee("Ann")
        boss = await make_employee("Boss", "admin")
        resp = await client.post(
            "/api/v1/notifications",
            json={"user_id": str(ann.id), "message": "   "},
            headers=auth_headers(boss),
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_fan_out_all_or_nothing(self, client, make_employee, auth_headers):
        ann = await make_employee("Ann")
        boss = await make_employee("Boss", "admin")

        resp = await client.post(
            "/api/v1/notifications/fan-out",
            json={"user_ids": [str(ann.id), str(uuid.uuid4())], "message": "Shift change"},
            headers=auth_headers(boss),
        )
        assert resp.status_code == 404

        listing = await client.get(f"/api/v1/users/{ann.id}/notifications", headers=auth_headers(ann))
        assert listing.json()["data"] == []

        resp = await client.post(
            "/api/v1/notifications/fan-out",
            json={"user_ids": [str(ann.id), str(boss.id)], "message": "Shift change"},
            headers=auth_headers(boss),
        )
        assert resp.status_code == 201
        assert len(resp.json()) == 2
