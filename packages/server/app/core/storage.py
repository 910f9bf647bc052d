"""
Thin async client for the hosted object-storage admin API.

Only the bucket calls needed for provisioning are implemented:
- GET  /bucket          list buckets
- POST /bucket          create a bucket
- PUT  /bucket/{id}     update bucket visibility
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from app.core.config import Settings

log = structlog.get_logger()


class StorageError(Exception):
    """Raised when the storage admin API rejects or fails a call."""


class StorageAdminClient:
    """Service-key authenticated calls against the storage admin API."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        request_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(request_timeout),
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageAdminClient":
        return cls(
            settings.storage_url,
            settings.storage_service_key,
            request_timeout=settings.storage_request_timeout_seconds,
        )

    async def __aenter__(self) -> "StorageAdminClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.error(
                "storage.api_error",
                method=method,
                path=path,
                status=exc.response.status_code,
            )
            raise StorageError(
                f"{method} {path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            log.error("storage.unreachable", method=method, path=path, error=str(exc))
            raise StorageError(f"{method} {path} failed: {exc}") from exc
        return resp.json() if resp.content else None

    async def list_buckets(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/bucket") or []

    async def create_bucket(self, name: str, *, public: bool, file_size_limit: int) -> None:
        await self._request(
            "POST",
            "/bucket",
            json={
                "id": name,
                "name": name,
                "public": public,
                "file_size_limit": file_size_limit,
            },
        )

    async def make_public(self, name: str) -> None:
        await self._request("PUT", f"/bucket/{name}", json={"public": True})
