"""
Rush order service: creation, listing, status updates and employee assignments.

Creating an order broadcasts "New rush order: <title>" to every notifiable
employee; assigning employees notifies only the newly assigned ones.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.base import as_utc, utcnow
from app.models.employee import Employee
from app.models.rush_order import RushOrder, RushOrderAssignment
from app.services import notifications as notification_service
from shopfloor_shared.schemas.common import RushOrderStatus
from shopfloor_shared.schemas.rush_orders import RushOrderCreate, RushOrderRead

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_rush_order_or_404(session: AsyncSession, rush_order_id: uuid.UUID) -> RushOrder:
    rush_order = await session.get(RushOrder, rush_order_id)
    if not rush_order:
        raise HTTPException(status_code=404, detail="Rush order not found")
    return rush_order


async def _get_assignee_ids(
    session: AsyncSession, rush_order_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, list[uuid.UUID]]:
    if not rush_order_ids:
        return {}
    result = await session.execute(
        select(RushOrderAssignment.rush_order_id, RushOrderAssignment.employee_id).where(
            RushOrderAssignment.rush_order_id.in_(rush_order_ids)
        )
    )
    assignees: dict[uuid.UUID, list[uuid.UUID]] = defaultdict(list)
    for rush_order_id, employee_id in result.all():
        assignees[rush_order_id].append(employee_id)
    return assignees


def _to_read(rush_order: RushOrder, assignee_ids: list[uuid.UUID]) -> RushOrderRead:
    return RushOrderRead(
        id=rush_order.id,
        title=rush_order.title,
        description=rush_order.description,
        deadline=as_utc(rush_order.deadline),
        status=rush_order.status,
        priority=rush_order.priority,
        image_url=rush_order.image_url,
        created_by=rush_order.created_by,
        assigned_employee_ids=assignee_ids,
        created_at=as_utc(rush_order.created_at),
        updated_at=as_utc(rush_order.updated_at),
    )


async def enrich_rush_order(session: AsyncSession, rush_order: RushOrder) -> RushOrderRead:
    assignees = await _get_assignee_ids(session, [rush_order.id])
    return _to_read(rush_order, assignees.get(rush_order.id, []))


async def _require_employees(session: AsyncSession, employee_ids: list[uuid.UUID]) -> None:
    result = await session.execute(select(Employee.id).where(Employee.id.in_(employee_ids)))
    known = {row[0] for row in result.all()}
    missing = [eid for eid in employee_ids if eid not in known]
    if missing:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown employees: {', '.join(str(eid) for eid in missing)}",
        )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_rush_order(
    session: AsyncSession,
    params: RushOrderCreate,
    created_by: uuid.UUID,
) -> RushOrderRead:
    assignee_ids = list(dict.fromkeys(params.assigned_employee_ids))
    if assignee_ids:
        await _require_employees(session, assignee_ids)

    rush_order = RushOrder(
        title=params.title,
        description=params.description,
        deadline=params.deadline,
        image_url=params.image_url,
        created_by=created_by,
    )
    session.add(rush_order)
    await session.flush()

    for eid in assignee_ids:
        session.add(RushOrderAssignment(rush_order_id=rush_order.id, employee_id=eid))
    await session.flush()

    await notification_service.notify_all_users(
        session, f"New rush order: {rush_order.title}", rush_order.id
    )
    log.info("rush_orders.created", rush_order_id=str(rush_order.id), assignees=len(assignee_ids))
    return _to_read(rush_order, assignee_ids)


async def list_rush_orders(session: AsyncSession) -> list[RushOrderRead]:
    result = await session.execute(select(RushOrder).order_by(RushOrder.created_at.desc()))
    rush_orders = result.scalars().all()
    assignees = await _get_assignee_ids(session, [r.id for r in rush_orders])
    return [_to_read(r, assignees.get(r.id, [])) for r in rush_orders]


async def get_rush_order(session: AsyncSession, rush_order_id: uuid.UUID) -> RushOrderRead:
    rush_order = await get_rush_order_or_404(session, rush_order_id)
    return await enrich_rush_order(session, rush_order)


async def update_rush_order_status(
    session: AsyncSession,
    rush_order_id: uuid.UUID,
    status: RushOrderStatus,
) -> RushOrderRead:
    rush_order = await get_rush_order_or_404(session, rush_order_id)
    rush_order.status = status.value
    rush_order.updated_at = utcnow()
    session.add(rush_order)
    await session.flush()
    log.info("rush_orders.status_changed", rush_order_id=str(rush_order_id), status=status.value)
    return await enrich_rush_order(session, rush_order)


async def assign_employees(
    session: AsyncSession,
    rush_order_id: uuid.UUID,
    employee_ids: list[uuid.UUID],
) -> RushOrderRead:
    rush_order = await get_rush_order_or_404(session, rush_order_id)
    requested = list(dict.fromkeys(employee_ids))
    await _require_employees(session, requested)

    existing = (await _get_assignee_ids(session, [rush_order_id])).get(rush_order_id, [])
    added = [eid for eid in requested if eid not in existing]
    for eid in added:
        session.add(RushOrderAssignment(rush_order_id=rush_order_id, employee_id=eid))
    await session.flush()

    if added:
        await notification_service.create_notifications_for_users(
            session,
            added,
            f"You have been assigned to rush order: {rush_order.title}",
            rush_order_id,
        )
    log.info("rush_orders.assigned", rush_order_id=str(rush_order_id), added=len(added))
    return _to_read(rush_order, existing + added)
