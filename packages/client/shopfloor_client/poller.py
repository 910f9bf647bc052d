"""
Fixed-interval polling loop with an explicit start/stop lifecycle.

A tick runs immediately on start and then once per interval. refresh_now()
runs an out-of-band tick without disturbing the schedule. Scheduled ticks
run one at a time, but a refresh_now() tick can overlap one in flight; there
is no ordering between them, so the last to resolve wins.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import structlog

log = structlog.get_logger()

Tick = Callable[[], Awaitable[Any]]


class Poller:
    """Runs `tick` every `interval` seconds until stopped."""

    def __init__(self, name: str, interval: float, tick: Tick):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._name = name
        self._interval = interval
        self._tick = tick
        self._running = False
        self._task: asyncio.Task | None = None
        self._tick_count = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        return self._tick_count

    async def start(self) -> None:
        """Start the loop. The first tick is scheduled immediately."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        log.debug("poller.started", poller=self._name, interval=self._interval)

    async def refresh_now(self) -> None:
        """Run one tick right away, outside the schedule."""
        await self._run_tick()

    async def stop(self) -> None:
        """Stop polling. A tick in flight is cancelled."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.debug("poller.stopped", poller=self._name, ticks=self._tick_count)

    async def _loop(self) -> None:
        while self._running:
            await self._run_tick()
            await asyncio.sleep(self._interval)

    async def _run_tick(self) -> None:
        self._tick_count += 1
        try:
            await self._tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            # A broken tick must not kill the schedule.
            log.exception("poller.tick_failed", poller=self._name)
