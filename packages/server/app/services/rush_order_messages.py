"""
Rush-order discussion threads: append-only messages and per-employee read receipts.

Handles:
- Thread listing with author name/role joined in (authors may be gone)
- Posting messages (text is validated by callers, not here)
- Receipt upsert with a non-decreasing last_read_at
- Unread counts, which degrade to zero on store failure
"""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import as_utc, utcnow
from app.models.employee import Employee
from app.models.rush_order_message import RushOrderMessage, RushOrderMessageReceipt
from shopfloor_shared.schemas.rush_orders import RushOrderMessageRead

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_read(message: RushOrderMessage, author: Employee | None) -> RushOrderMessageRead:
    return RushOrderMessageRead(
        id=message.id,
        rush_order_id=message.rush_order_id,
        employee_id=message.employee_id,
        message=message.message,
        created_at=as_utc(message.created_at),
        updated_at=as_utc(message.updated_at),
        employee_name=author.name if author else None,
        employee_role=author.role if author else None,
    )


async def _get_receipt(
    session: AsyncSession, rush_order_id: uuid.UUID, employee_id: uuid.UUID
) -> RushOrderMessageReceipt | None:
    result = await session.execute(
        select(RushOrderMessageReceipt).where(
            RushOrderMessageReceipt.rush_order_id == rush_order_id,
            RushOrderMessageReceipt.employee_id == employee_id,
        )
    )
    return result.scalar_one_or_none()


def _bump(receipt: RushOrderMessageReceipt, now: datetime) -> None:
    receipt.last_read_at = max(as_utc(receipt.last_read_at), now)


# ---------------------------------------------------------------------------
# Thread
# ---------------------------------------------------------------------------


async def get_rush_order_messages(
    session: AsyncSession, rush_order_id: uuid.UUID
) -> list[RushOrderMessageRead]:
    """Thread in posting order, oldest first."""
    result = await session.execute(
        select(RushOrderMessage, Employee)
        .outerjoin(Employee, Employee.id == RushOrderMessage.employee_id)
        .where(RushOrderMessage.rush_order_id == rush_order_id)
        .order_by(RushOrderMessage.created_at.asc(), RushOrderMessage.id)
    )
    return [_to_read(message, author) for message, author in result.all()]


async def add_rush_order_message(
    session: AsyncSession,
    rush_order_id: uuid.UUID,
    employee_id: uuid.UUID,
    message: str,
) -> RushOrderMessageRead:
    row = RushOrderMessage(
        rush_order_id=rush_order_id,
        employee_id=employee_id,
        message=message,
    )
    session.add(row)
    await session.flush()

    author = await session.get(Employee, employee_id)
    log.info(
        "rush_orders.message_posted",
        rush_order_id=str(rush_order_id),
        message_id=str(row.id),
    )
    return _to_read(row, author)


# ---------------------------------------------------------------------------
# Read receipts
# ---------------------------------------------------------------------------


async def mark_messages_as_read(
    session: AsyncSession, rush_order_id: uuid.UUID, employee_id: uuid.UUID
) -> RushOrderMessageReceipt:
    """
    Upsert the (rush order, employee) receipt to now.

    Find first, then insert or update. If another writer inserted the same pair
    in between, the insert fails on the primary key and the existing row is
    updated instead. last_read_at never moves backwards.
    """
    now = utcnow()
    receipt = await _get_receipt(session, rush_order_id, employee_id)
    if receipt is not None:
        _bump(receipt, now)
        session.add(receipt)
        await session.flush()
        return receipt

    receipt = RushOrderMessageReceipt(
        rush_order_id=rush_order_id,
        employee_id=employee_id,
        last_read_at=now,
    )
    try:
        async with session.begin_nested():
            session.add(receipt)
    except IntegrityError:
        log.info(
            "rush_orders.receipt_race",
            rush_order_id=str(rush_order_id),
            employee_id=str(employee_id),
        )
        receipt = await _get_receipt(session, rush_order_id, employee_id)
        if receipt is None:
            raise
        _bump(receipt, now)
        session.add(receipt)
        await session.flush()
    return receipt


async def get_unread_messages_count(
    session: AsyncSession, rush_order_id: uuid.UUID, employee_id: uuid.UUID
) -> int:
    """
    Messages posted after the employee's last read. Without a receipt the
    whole thread is unread.

    Backs a cosmetic badge, so a store failure logs and yields 0.
    """
    try:
        receipt = await _get_receipt(session, rush_order_id, employee_id)
        stmt = (
            select(func.count())
            .select_from(RushOrderMessage)
            .where(RushOrderMessage.rush_order_id == rush_order_id)
        )
        if receipt is not None:
            stmt = stmt.where(RushOrderMessage.created_at > receipt.last_read_at)
        result = await session.execute(stmt)
        return result.scalar_one()
    except SQLAlchemyError as exc:
        log.warning(
            "rush_orders.unread_count_failed",
            rush_order_id=str(rush_order_id),
            employee_id=str(employee_id),
            error=str(exc),
        )
        return 0
