"""
Rush order endpoints: CRUD, assignments and the per-order discussion thread.

Thread routes always act as the caller: messages are authored by, and
receipts and unread counts belong to, the authenticated employee.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import CurrentEmployee, require_employee, require_supervisor
from app.core.database import get_session
from app.models.base import as_utc
from app.services import rush_order_messages as message_service
from app.services import rush_orders as rush_order_service
from shopfloor_shared.schemas.rush_orders import (
    AssignmentAdd,
    ReadReceipt,
    RushOrderCreate,
    RushOrderListResponse,
    RushOrderMessageCreate,
    RushOrderMessageListResponse,
    RushOrderMessageRead,
    RushOrderRead,
    RushOrderStatusUpdate,
    UnreadMessagesCount,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Rush orders
# ---------------------------------------------------------------------------


@router.get("", response_model=RushOrderListResponse)
async def list_rush_orders(
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    return RushOrderListResponse(data=await rush_order_service.list_rush_orders(session))


@router.post("", response_model=RushOrderRead, status_code=status.HTTP_201_CREATED)
async def create_rush_order(
    body: RushOrderCreate,
    current: CurrentEmployee = Depends(require_supervisor),
    session: AsyncSession = Depends(get_session),
):
    """Create a rush order and notify every notifiable employee."""
    return await rush_order_service.create_rush_order(session, body, current.employee_id)


@router.get("/{rush_order_id}", response_model=RushOrderRead)
async def get_rush_order(
    rush_order_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    return await rush_order_service.get_rush_order(session, rush_order_id)


@router.patch("/{rush_order_id}/status", response_model=RushOrderRead)
async def update_status(
    rush_order_id: uuid.UUID,
    body: RushOrderStatusUpdate,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    return await rush_order_service.update_rush_order_status(session, rush_order_id, body.status)


@router.post("/{rush_order_id}/assignments", response_model=RushOrderRead)
async def assign_employees(
    rush_order_id: uuid.UUID,
    body: AssignmentAdd,
    current: CurrentEmployee = Depends(require_supervisor),
    session: AsyncSession = Depends(get_session),
):
    return await rush_order_service.assign_employees(session, rush_order_id, body.employee_ids)


# ---------------------------------------------------------------------------
# Discussion thread
# ---------------------------------------------------------------------------


@router.get("/{rush_order_id}/messages", response_model=RushOrderMessageListResponse)
async def list_messages(
    rush_order_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    """Thread oldest first, with author name and role."""
    await rush_order_service.get_rush_order_or_404(session, rush_order_id)
    messages = await message_service.get_rush_order_messages(session, rush_order_id)
    return RushOrderMessageListResponse(data=messages)


@router.post(
    "/{rush_order_id}/messages",
    response_model=RushOrderMessageRead,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    rush_order_id: uuid.UUID,
    body: RushOrderMessageCreate,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    await rush_order_service.get_rush_order_or_404(session, rush_order_id)
    return await message_service.add_rush_order_message(
        session, rush_order_id, current.employee_id, body.message
    )


@router.post("/{rush_order_id}/messages/read", response_model=ReadReceipt)
async def mark_thread_read(
    rush_order_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    await rush_order_service.get_rush_order_or_404(session, rush_order_id)
    receipt = await message_service.mark_messages_as_read(
        session, rush_order_id, current.employee_id
    )
    return ReadReceipt(
        rush_order_id=receipt.rush_order_id,
        employee_id=receipt.employee_id,
        last_read_at=as_utc(receipt.last_read_at),
    )


@router.get("/{rush_order_id}/messages/unread-count", response_model=UnreadMessagesCount)
async def unread_messages_count(
    rush_order_id: uuid.UUID,
    current: CurrentEmployee = Depends(require_employee),
    session: AsyncSession = Depends(get_session),
):
    count = await message_service.get_unread_messages_count(
        session, rush_order_id, current.employee_id
    )
    return UnreadMessagesCount(rush_order_id=rush_order_id, count=count)
