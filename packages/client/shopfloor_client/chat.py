"""
Rush-order chat controller.

Polls one rush order's thread, fetching immediately on mount and whenever the
rush order changes. Any change in the message list asks the view to scroll to
the latest message. Sending is user-initiated, so failures toast; background
poll failures only leave the thread stale.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable

import structlog

from shopfloor_shared.schemas.rush_orders import RushOrderMessageRead

from .api import APIError, ShopfloorAPI
from .poller import Poller

log = structlog.get_logger()

DEFAULT_INTERVAL_SECONDS = 10.0

EMPTY_MESSAGE_TOAST = "Message cannot be empty"
SEND_FAILED_TOAST = "Failed to send message"


def _noop(*_) -> None:
    pass


class RushOrderChat:
    """Thread view state for one rush order, with a draft and a send action."""

    def __init__(
        self,
        api: ShopfloorAPI,
        rush_order_id: uuid.UUID,
        *,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        on_scroll_to_latest: Callable[[], None] = _noop,
        on_toast: Callable[[str], None] = _noop,
    ):
        self._api = api
        self._interval = interval
        self._on_scroll_to_latest = on_scroll_to_latest
        self._on_toast = on_toast

        self.rush_order_id = rush_order_id
        self.messages: list[RushOrderMessageRead] = []
        self.draft = ""
        self.sending = False
        self.last_synced_at: datetime | None = None
        self._disposed = False
        self._poller = self._new_poller()

    @property
    def can_send(self) -> bool:
        return not self.sending and bool(self.draft.strip())

    def _new_poller(self) -> Poller:
        return Poller(f"chat:{self.rush_order_id}", self._interval, self.refresh)

    # --- Lifecycle ---

    async def mount(self) -> None:
        await self._poller.start()

    async def dispose(self) -> None:
        self._disposed = True
        await self._poller.stop()

    async def switch_to(self, rush_order_id: uuid.UUID) -> None:
        """Follow a different rush order: drop the old thread and fetch the new one."""
        if rush_order_id == self.rush_order_id:
            return
        await self._poller.stop()
        self.rush_order_id = rush_order_id
        self.messages = []
        self.last_synced_at = None
        self._poller = self._new_poller()
        if not self._disposed:
            await self._poller.start()

    # --- Polling ---

    async def refresh(self) -> None:
        if self._disposed:
            return
        rush_order_id = self.rush_order_id
        try:
            messages = await self._api.get_rush_order_messages(rush_order_id)
        except APIError as exc:
            log.warning("chat.poll_failed", rush_order_id=str(rush_order_id), error=str(exc))
            return

        # Ignore results for a thread we have since left.
        if self._disposed or rush_order_id != self.rush_order_id:
            return
        changed = messages != self.messages
        self.messages = messages
        self.last_synced_at = datetime.now(timezone.utc)
        if changed:
            self._on_scroll_to_latest()

    # --- Sending ---

    async def send(self) -> bool:
        """
        Post the draft. Returns True when the message was stored.

        Blank drafts never reach the API. On success the draft is cleared and
        the thread re-fetched at once; on failure the draft is kept for retry.
        """
        if self.sending:
            return False
        text = self.draft.strip()
        if not text:
            self._on_toast(EMPTY_MESSAGE_TOAST)
            return False

        self.sending = True
        try:
            await self._api.add_rush_order_message(self.rush_order_id, text)
        except APIError as exc:
            log.warning("chat.send_failed", rush_order_id=str(self.rush_order_id), error=str(exc))
            if not self._disposed:
                self._on_toast(SEND_FAILED_TOAST)
            return False
        finally:
            self.sending = False

        if self._disposed:
            return True
        self.draft = ""
        await self._poller.refresh_now()
        return True
