"""Rush order and rush-order discussion schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import RushOrderStatus


# ---------------------------------------------------------------------------
# Rush orders
# ---------------------------------------------------------------------------

class RushOrderCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    deadline: datetime
    image_url: Optional[str] = None
    assigned_employee_ids: List[uuid.UUID] = Field(default_factory=list)


class RushOrderStatusUpdate(BaseModel):
    status: RushOrderStatus


class AssignmentAdd(BaseModel):
    employee_ids: List[uuid.UUID] = Field(min_length=1)


class RushOrderRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    deadline: datetime
    status: str
    priority: str
    image_url: Optional[str] = None
    created_by: uuid.UUID
    assigned_employee_ids: List[uuid.UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class RushOrderListResponse(BaseModel):
    data: List[RushOrderRead]


# ---------------------------------------------------------------------------
# Discussion thread
# ---------------------------------------------------------------------------

class RushOrderMessageCreate(BaseModel):
    """Request body for POST /rush-orders/{id}/messages. Blank text is rejected here."""
    message: str = Field(max_length=4000)

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("message must not be empty")
        return stripped


class RushOrderMessageRead(BaseModel):
    id: uuid.UUID
    rush_order_id: uuid.UUID
    employee_id: uuid.UUID
    message: str
    created_at: datetime
    updated_at: datetime
    employee_name: Optional[str] = None
    employee_role: Optional[str] = None


class RushOrderMessageListResponse(BaseModel):
    data: List[RushOrderMessageRead]


class ReadReceipt(BaseModel):
    rush_order_id: uuid.UUID
    employee_id: uuid.UUID
    last_read_at: datetime


class UnreadMessagesCount(BaseModel):
    rush_order_id: uuid.UUID
    count: int = Field(ge=0)
