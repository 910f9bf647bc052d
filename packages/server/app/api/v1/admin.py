"""
Administrative endpoints: storage bucket provisioning and database-init acknowledgment.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from app.core.auth import CurrentEmployee, require_admin
from app.core.config import get_settings
from app.core.storage import StorageAdminClient
from app.services.storage import ensure_buckets
from shopfloor_shared.schemas.admin import BucketProvisionResponse, InitDatabaseResponse

log = structlog.get_logger()
router = APIRouter()


def get_storage_client() -> StorageAdminClient:
    return StorageAdminClient.from_settings(get_settings())


@router.post("/storage/buckets", response_model=BucketProvisionResponse)
async def provision_buckets(
    current: CurrentEmployee = Depends(require_admin),
    storage: StorageAdminClient = Depends(get_storage_client),
):
    """Ensure the configured buckets exist with public read. Safe to call repeatedly."""
    settings = get_settings()
    async with storage:
        results = await ensure_buckets(
            storage,
            settings.storage_buckets,
            file_size_limit=settings.storage_file_size_limit,
        )
    return BucketProvisionResponse(buckets=results)


@router.post("/init-database", response_model=InitDatabaseResponse)
async def init_database(current: CurrentEmployee = Depends(require_admin)):
    """Placeholder: the schema is managed by migrations, nothing to do here."""
    log.info("admin.init_database_acknowledged", employee_id=str(current.employee_id))
    return InitDatabaseResponse()
