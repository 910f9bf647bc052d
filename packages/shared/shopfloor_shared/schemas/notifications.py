"""Notification schemas shared by the API server and the polling client."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class NotificationRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    message: str
    read: bool
    rush_order_id: Optional[uuid.UUID] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    data: List[NotificationRead]


class NotificationCreate(BaseModel):
    """Request body for POST /notifications."""
    user_id: uuid.UUID
    message: str = Field(min_length=1, max_length=2000)
    rush_order_id: Optional[uuid.UUID] = None

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value.strip()


class NotificationFanOut(BaseModel):
    """Request body for POST /notifications/fan-out (all-or-nothing)."""
    user_ids: List[uuid.UUID] = Field(min_length=1)
    message: str = Field(min_length=1, max_length=2000)
    rush_order_id: Optional[uuid.UUID] = None

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value.strip()


class UnreadCount(BaseModel):
    count: int = Field(ge=0)
