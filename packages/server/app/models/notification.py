"""Notification model. The read flag only ever moves from False to True."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Notification(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "notifications"

    user_id: uuid.UUID = Field(foreign_key="employees.id", nullable=False, index=True)
    message: str = Field(nullable=False)
    read: bool = Field(default=False, nullable=False)
    rush_order_id: Optional[uuid.UUID] = Field(default=None, foreign_key="rush_orders.id", index=True)
