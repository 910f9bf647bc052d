"""Rush-order discussion messages (append-only) and per-employee read receipts."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin, utcnow


class RushOrderMessage(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "rush_order_messages"

    rush_order_id: uuid.UUID = Field(foreign_key="rush_orders.id", nullable=False, index=True)
    # No foreign key: messages outlive their authors.
    employee_id: uuid.UUID = Field(nullable=False, index=True)
    message: str = Field(nullable=False)


class RushOrderMessageReceipt(SQLModel, table=True):
    """Read receipt: one row per (rush order, employee)."""

    __tablename__ = "rush_order_message_reads"

    rush_order_id: uuid.UUID = Field(foreign_key="rush_orders.id", primary_key=True)
    employee_id: uuid.UUID = Field(foreign_key="employees.id", primary_key=True)
    last_read_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
