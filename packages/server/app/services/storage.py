"""
Storage provisioning: make sure the application's buckets exist and are public.

Idempotent. Each bucket is handled independently so that one failure does not
hide the state of the others; the per-bucket status is `created`, `exists` or
`error`.
"""

from __future__ import annotations

import structlog

from app.core.storage import StorageAdminClient, StorageError
from shopfloor_shared.schemas.admin import BucketResult
from shopfloor_shared.schemas.common import BucketStatus

log = structlog.get_logger()


async def ensure_buckets(
    client: StorageAdminClient,
    names: list[str],
    *,
    file_size_limit: int,
) -> list[BucketResult]:
    try:
        existing = {b.get("name"): b for b in await client.list_buckets()}
    except StorageError as exc:
        log.error("storage.list_failed", error=str(exc))
        return [
            BucketResult(name=name, status=BucketStatus.ERROR, error=str(exc))
            for name in names
        ]

    results: list[BucketResult] = []
    for name in names:
        bucket = existing.get(name)
        try:
            if bucket is None:
                await client.create_bucket(name, public=True, file_size_limit=file_size_limit)
                log.info("storage.bucket_created", bucket=name)
                results.append(BucketResult(name=name, status=BucketStatus.CREATED))
                continue

            if not bucket.get("public", False):
                await client.make_public(name)
                log.info("storage.bucket_made_public", bucket=name)
            results.append(BucketResult(name=name, status=BucketStatus.EXISTS))
        except StorageError as exc:
            log.error("storage.bucket_failed", bucket=name, error=str(exc))
            results.append(BucketResult(name=name, status=BucketStatus.ERROR, error=str(exc)))

    return results
