"""
Periodic schedule refresh.

Background task that reloads the whole maintenance table every
SCHEDULE_REFRESH_INTERVAL seconds. A reload may overlap one triggered by
a user action; whichever finishes last replaces the list.
"""

from __future__ import annotations

import asyncio
import logging

from schedule.store import EventStore

logger = logging.getLogger("schedule.refresher")


class EventRefresher:
    """Background task: keeps the event store in step with the backend."""

    def __init__(self, store: EventStore, interval: float):
        self.store = store
        self.interval = interval
        self._running = False

    async def start(self) -> None:
        self._running = True
        logger.info("EventRefresher started (reload every %ds)", self.interval)

        while self._running:
            await asyncio.sleep(self.interval)
            if not self._running:
                break
            try:
                await self.store.fetch_all()
            except Exception as exc:
                logger.error("EventRefresher cycle error: %s", exc, exc_info=True)

    async def stop(self) -> None:
        self._running = False
        logger.info("EventRefresher stopped")
