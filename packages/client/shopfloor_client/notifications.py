"""
Notification dropdown controller.

Keeps a local snapshot of the employee's notifications, refreshed on mount and
every poll interval. The snapshot is never authoritative:
- A failed poll keeps the previous snapshot (stale but available), no toast
- Clicks and mark-all patch the snapshot first, then call the API; the next
  poll reconciles any divergence, there is no rollback
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

import structlog

from shopfloor_shared.schemas.notifications import NotificationRead

from .api import APIError, ShopfloorAPI
from .poller import Poller

log = structlog.get_logger()

DEFAULT_INTERVAL_SECONDS = 60.0
BADGE_CAP = 9


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


def badge_text(unread: int) -> str:
    if unread <= 0:
        return ""
    if unread > BADGE_CAP:
        return f"{BADGE_CAP}+"
    return str(unread)


def rush_order_path(rush_order_id: uuid.UUID) -> str:
    return f"/rush-orders/{rush_order_id}"


def _noop(_: str) -> None:
    pass


class NotificationDropdown:
    """Polling notification inbox for one employee."""

    def __init__(
        self,
        api: ShopfloorAPI,
        employee_id: uuid.UUID,
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        on_navigate: Callable[[str], None] = _noop,
        on_toast: Callable[[str], None] = _noop,
        on_change: Callable[[], None] | None = None,
    ):
        self._api = api
        self._employee_id = employee_id
        self._on_navigate = on_navigate
        self._on_toast = on_toast
        self._on_change = on_change
        self._poller = Poller(f"notifications:{employee_id}", interval, self.refresh)

        self.state = LoadState.IDLE
        self.notifications: list[NotificationRead] = []
        self.unread_count = 0
        self.last_synced_at: datetime | None = None
        self._disposed = False

    @property
    def badge(self) -> str:
        return badge_text(self.unread_count)

    # --- Lifecycle ---

    async def mount(self) -> None:
        await self._poller.start()

    async def dispose(self) -> None:
        self._disposed = True
        await self._poller.stop()

    # --- Polling ---

    async def refresh(self) -> None:
        """Fetch and replace the snapshot. On failure the old snapshot stays."""
        if self._disposed:
            return
        self.state = LoadState.LOADING
        try:
            notifications = await self._api.get_user_notifications(self._employee_id)
        except APIError as exc:
            if self._disposed:
                return
            log.warning(
                "notifications.poll_failed",
                employee_id=str(self._employee_id),
                error=str(exc),
            )
            self.state = LoadState.ERRORED
            return

        if self._disposed:
            return
        self.notifications = notifications
        self.unread_count = sum(1 for n in notifications if not n.read)
        self.last_synced_at = datetime.now(timezone.utc)
        self.state = LoadState.LOADED
        self._changed()

    # --- User actions ---

    async def click(self, notification_id: uuid.UUID) -> None:
        """Mark the item read (optimistically) and follow its rush order, if any."""
        if self._disposed:
            return
        item = next((n for n in self.notifications if n.id == notification_id), None)
        if item is None:
            return

        if not item.read:
            self._patch(notification_id)
            self.unread_count = max(0, self.unread_count - 1)
            self._changed()
            try:
                await self._api.mark_as_read(notification_id)
            except APIError as exc:
                log.warning(
                    "notifications.mark_read_failed",
                    notification_id=str(notification_id),
                    error=str(exc),
                )

        if item.rush_order_id is not None and not self._disposed:
            self._on_navigate(rush_order_path(item.rush_order_id))

    async def mark_all_as_read(self) -> None:
        self.notifications = [
            n if n.read else n.model_copy(update={"read": True}) for n in self.notifications
        ]
        self.unread_count = 0
        self._changed()
        try:
            await self._api.mark_all_as_read(self._employee_id)
        except APIError as exc:
            log.warning(
                "notifications.mark_all_failed",
                employee_id=str(self._employee_id),
                error=str(exc),
            )
            if not self._disposed:
                self._on_toast("Could not mark notifications as read")

    # --- Helpers ---

    def _patch(self, notification_id: uuid.UUID) -> None:
        self.notifications = [
            n.model_copy(update={"read": True}) if n.id == notification_id else n
            for n in self.notifications
        ]

    def _changed(self) -> None:
        if self._on_change is not None and not self._disposed:
            self._on_change()
