"""Schemas for the administrative endpoints (storage provisioning, database init)."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from .common import BucketStatus


class BucketResult(BaseModel):
    name: str
    status: BucketStatus
    error: Optional[str] = None


class BucketProvisionResponse(BaseModel):
    buckets: List[BucketResult]


class InitDatabaseResponse(BaseModel):
    status: str = "ok"
    message: str = "Database initialization acknowledged"
