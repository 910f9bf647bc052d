"""Rush order and its employee assignments."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, TimestampMixin, UUIDMixin


class RushOrder(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "rush_orders"

    title: str = Field(nullable=False)
    description: str = Field(nullable=False)
    deadline: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    status: str = Field(default="pending", nullable=False)  # pending | in_progress | completed
    priority: str = Field(default="critical", nullable=False)
    image_url: Optional[str] = None
    created_by: uuid.UUID = Field(foreign_key="employees.id", nullable=False)


class RushOrderAssignment(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "rush_order_assignments"

    rush_order_id: uuid.UUID = Field(foreign_key="rush_orders.id", primary_key=True)
    employee_id: uuid.UUID = Field(foreign_key="employees.id", primary_key=True)
