"""
Notification service: fetch, create and mark-read over the notifications table.

Failures surface to the caller. A fetch error is reported as
`notifications_unavailable` (503) so it is never mistaken for an empty inbox.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import service_unavailable
from app.models.employee import Employee
from app.models.notification import Notification
from shopfloor_shared.schemas.common import NOTIFIABLE_ROLES
from shopfloor_shared.schemas.notifications import NotificationCreate

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_user_notifications(
    session: AsyncSession, user_id: uuid.UUID
) -> list[Notification]:
    """All notifications of a recipient, newest first."""
    try:
        result = await session.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        )
    except SQLAlchemyError as exc:
        log.error("notifications.fetch_failed", user_id=str(user_id), error=str(exc))
        raise service_unavailable(
            "notifications_unavailable", "Notifications could not be loaded"
        ) from exc
    return list(result.scalars().all())


async def get_unread_count(session: AsyncSession, user_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Mark read
# ---------------------------------------------------------------------------


async def mark_as_read(
    session: AsyncSession,
    notification_id: uuid.UUID,
    owner_id: Optional[uuid.UUID] = None,
) -> None:
    """
    Flip one notification to read.

    Already-read, missing and (when `owner_id` is given) foreign notifications
    are all success no-ops.
    """
    stmt = update(Notification).where(
        Notification.id == notification_id,
        Notification.read == False,  # noqa: E712
    )
    if owner_id is not None:
        stmt = stmt.where(Notification.user_id == owner_id)
    result = await session.execute(stmt.values(read=True))
    if result.rowcount == 0:
        log.debug("notifications.mark_read_noop", notification_id=str(notification_id))


async def mark_all_as_read(session: AsyncSession, user_id: uuid.UUID) -> int:
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
        .values(read=True)
    )
    log.info("notifications.marked_all_read", user_id=str(user_id), count=result.rowcount)
    return result.rowcount


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


async def create_notification(
    session: AsyncSession, params: NotificationCreate
) -> Notification:
    recipient = await session.get(Employee, params.user_id)
    if not recipient:
        raise HTTPException(status_code=404, detail="Recipient not found")

    notification = Notification(
        user_id=params.user_id,
        message=params.message,
        rush_order_id=params.rush_order_id,
    )
    session.add(notification)
    await session.flush()
    return notification


async def create_notifications_for_users(
    session: AsyncSession,
    user_ids: Iterable[uuid.UUID],
    message: str,
    rush_order_id: Optional[uuid.UUID] = None,
) -> list[Notification]:
    """
    Fan-out: one notification per distinct recipient, all or nothing.

    Every recipient is checked before anything is written, then all rows are
    flushed together inside the caller's transaction. Any failure leaves no
    rows behind once the transaction rolls back.
    """
    recipients = list(dict.fromkeys(user_ids))
    if not recipients:
        return []

    result = await session.execute(select(Employee.id).where(Employee.id.in_(recipients)))
    known = {row[0] for row in result.all()}
    missing = [uid for uid in recipients if uid not in known]
    if missing:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown recipients: {', '.join(str(uid) for uid in missing)}",
        )

    notifications = [
        Notification(user_id=uid, message=message, rush_order_id=rush_order_id)
        for uid in recipients
    ]
    session.add_all(notifications)
    try:
        await session.flush()
    except SQLAlchemyError:
        log.error("notifications.fan_out_failed", recipients=len(recipients))
        await session.rollback()
        raise

    log.info(
        "notifications.fanned_out",
        recipients=len(recipients),
        rush_order_id=str(rush_order_id) if rush_order_id else None,
    )
    return notifications


async def notify_all_users(
    session: AsyncSession,
    message: str,
    rush_order_id: Optional[uuid.UUID] = None,
) -> list[Notification]:
    """Fan-out to every employee in a notifiable role."""
    result = await session.execute(
        select(Employee.id).where(Employee.role.in_([r.value for r in NOTIFIABLE_ROLES]))
    )
    user_ids = [row[0] for row in result.all()]
    return await create_notifications_for_users(session, user_ids, message, rush_order_id)
