"""Employee model (recipients of notifications, authors of rush-order messages)."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Employee(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "employees"

    name: str = Field(nullable=False)
    email: Optional[str] = Field(default=None, unique=True, index=True)
    role: str = Field(nullable=False, default="worker", index=True)  # admin | manager | worker | workstation | installation_team
    workstation: Optional[str] = None
