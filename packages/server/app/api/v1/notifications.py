"""
Notification endpoints.

Employees read and mark their own notifications; admins and managers may act
on anyone's. Marking someone else's notification is a silent no-op.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentEmployee, require_employee, require_supervisor
from app.core.database import get_session
from app.models.base import as_utc
from app.models.notification import Notification
from app.services import notifications as notification_service
from shopfloor_shared.schemas.notifications import (
    NotificationCreate,
    NotificationFanOut,
    NotificationListResponse,
    NotificationRead,
    UnreadCount,
)

router = APIRouter()
user_router = APIRouter()


def _to_read(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id,
        user_id=notification.user_id,
        message=notification.message,
        read=notification.read,
        rush_order_id=notification.rush_order_id,
        created_at=as_utc(notification.created_at),
    )


def _check_owner(current: CurrentEmployee, user_id: uuid.UUID) -> None:
    if not current.can_act_for(user_id):
        raise HTTPException(status_code=403, detail="Cannot access another employee's notifications")


# ---------------------------------------------------------------------------
# Per-recipient routes (/users/{user_id}/notifications)
# ---------------------------------------------------------------------------


@user_router.get("", response_model=NotificationListResponse)
async def list_user_notifications(
    user_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    """All notifications of the recipient, newest first."""
    _check_owner(current, user_id)
    rows = await notification_service.get_user_notifications(session, user_id)
    return NotificationListResponse(data=[_to_read(n) for n in rows])


@user_router.get("/unread-count", response_model=UnreadCount)
async def unread_count(
    user_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    _check_owner(current, user_id)
    count = await notification_service.get_unread_count(session, user_id)
    return UnreadCount(count=count)


@user_router.post("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_read(
    user_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    _check_owner(current, user_id)
    await notification_service.mark_all_as_read(session, user_id)


# ---------------------------------------------------------------------------
# Notification routes (/notifications)
# ---------------------------------------------------------------------------


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    """Idempotent. Missing or foreign notifications succeed without change."""
    owner_id = None if current.is_supervisor else current.employee_id
    await notification_service.mark_as_read(session, notification_id, owner_id)


@router.post("", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def create_notification(
    body: NotificationCreate,
    current: CurrentEmployee = Depends(require_supervisor),
    session: AsyncSession = Depends(get_session),
):
    notification = await notification_service.create_notification(session, body)
    return _to_read(notification)


@router.post("/fan-out", response_model=List[NotificationRead], status_code=status.HTTP_201_CREATED)
async def fan_out_notifications(
    body: NotificationFanOut,
    current: CurrentEmployee = Depends(require_supervisor),
    session: AsyncSession = Depends(get_session),
):
    """One notification per distinct recipient; unknown recipients reject the whole call."""
    rows = await notification_service.create_notifications_for_users(
        session, body.user_ids, body.message, body.rush_order_id
    )
    return [_to_read(n) for n in rows]
