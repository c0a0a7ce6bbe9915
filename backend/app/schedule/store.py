"""Event store — the single writer of the in-memory maintenance schedule.

Every write goes to the row store and is followed by a full reload; the
local list is only ever replaced by a reload result, never patched. Views
read ``store.state`` and always see a complete list.

Only one write may be in flight per process (``is_syncing``). Nothing
guards against writes from other processes: there is no concurrency token,
and the last reload wins.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime

from pydantic import BaseModel

from schedule.clock import Clock, to_iso, utc_now
from schedule.models import (
    MaintenanceDraft,
    MaintenanceEvent,
    MaintenanceStatus,
    draft_to_row,
)
from schedule.normalizer import normalize_rows
from services.row_store.base import RowStore, RowStoreError

logger = logging.getLogger("schedule.store")

ORDER_COLUMN = "start_date"

LOAD_FAILED = "Gagal memuat data dari Supabase."
SAVE_FAILED = "Gagal menyimpan jadwal. Coba lagi."
DELETE_FAILED = "Gagal menghapus jadwal."
TOGGLE_FAILED = "Gagal memperbarui status jadwal."
BUSY = "Masih memproses perubahan sebelumnya."
CONFIRM_DELETE = "Hapus jadwal maintenance ini?"


class StoreError(Exception):
    """Base for failures surfaced to the user. ``str(exc)`` is the alert text."""


class LoadFailure(StoreError):
    """Reload failed; the previous list is still in place."""


class WriteFailure(StoreError):
    """Create/update/delete/toggle failed; nothing local was changed."""


class SyncInProgress(WriteFailure):
    """Another write from this process has not finished yet."""


class StoreState(BaseModel):
    events: tuple[MaintenanceEvent, ...] = ()
    is_loading: bool = False
    is_syncing: bool = False
    error_message: str = ""
    skipped_rows: int = 0
    last_loaded_at: datetime | None = None

    model_config = {"frozen": True}


Listener = Callable[[StoreState], Awaitable[None]]
Confirm = Callable[[str], bool]


class EventStore:

    def __init__(self, row_store: RowStore, clock: Clock = utc_now):
        self.row_store = row_store
        self.clock = clock
        self._state = StoreState()
        self._listeners: list[Listener] = []
        # status/end_date an event had before this process marked it Completed
        self._completion_stash: dict[str, tuple[MaintenanceStatus, str]] = {}

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def events(self) -> tuple[MaintenanceEvent, ...]:
        return self._state.events

    def get(self, event_id: str) -> MaintenanceEvent | None:
        for event in self._state.events:
            if event.id == event_id:
                return event
        return None

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _set(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)

    # ------------------------------------------------------------------
    # Reload
    # ------------------------------------------------------------------

    async def fetch_all(self, raise_errors: bool = False) -> bool:
        """Replace the list with the backend's, ordered by start date."""
        self._set(is_loading=True, error_message="")
        try:
            rows = await self.row_store.select_all(ORDER_COLUMN, ascending=True)
        except RowStoreError as exc:
            logger.error("Schedule reload failed: %s", exc)
            self._set(is_loading=False, error_message=LOAD_FAILED)
            if raise_errors:
                raise LoadFailure(LOAD_FAILED) from exc
            return False

        events, rejected = normalize_rows(rows, self.clock)
        for err in rejected:
            logger.warning("Skipping malformed schedule row: %s", err)

        self._set(
            events=tuple(events),
            is_loading=False,
            skipped_rows=len(rejected),
            last_loaded_at=self.clock(),
        )
        self._prune_stash(events)
        logger.debug("Schedule reloaded: %d events, %d skipped", len(events), len(rejected))
        await self._notify()
        return True

    def _prune_stash(self, events: list[MaintenanceEvent]) -> None:
        # keep entries only for events that are still present and still Completed
        completed = {e.id for e in events if e.is_completed}
        for event_id in list(self._completion_stash):
            if event_id not in completed:
                del self._completion_stash[event_id]

    async def _notify(self) -> None:
        state = self._state
        for listener in self._listeners:
            try:
                await listener(state)
            except Exception as exc:
                logger.error("Schedule listener failed: %s", exc, exc_info=True)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _syncing(self):
        if self._state.is_syncing:
            raise SyncInProgress(BUSY)
        self._set(is_syncing=True, error_message="")
        try:
            yield
        finally:
            self._set(is_syncing=False)

    async def create(self, draft: MaintenanceDraft) -> None:
        async with self._syncing():
            try:
                await self.row_store.insert(draft_to_row(draft))
            except RowStoreError as exc:
                logger.error("Create failed for %r: %s", draft.title, exc)
                raise WriteFailure(SAVE_FAILED) from exc
            logger.info("Maintenance window created: %s / %s", draft.system, draft.title)
            await self.fetch_all()

    async def update(self, draft: MaintenanceDraft) -> None:
        if not draft.id:
            raise ValueError("update() needs a draft with an id")
        async with self._syncing():
            try:
                await self.row_store.update(draft.id, draft_to_row(draft))
            except RowStoreError as exc:
                logger.error("Update failed for %s: %s", draft.id, exc)
                raise WriteFailure(SAVE_FAILED) from exc
            logger.info("Maintenance window %s updated", draft.id)
            await self.fetch_all()

    async def save(self, draft: MaintenanceDraft) -> None:
        if draft.is_update:
            await self.update(draft)
        else:
            await self.create(draft)

    async def delete(self, event_id: str, confirm: Confirm) -> bool:
        """Delete after a yes/no confirmation. Returns False when declined."""
        if not confirm(CONFIRM_DELETE):
            logger.debug("Delete of %s declined", event_id)
            return False
        async with self._syncing():
            try:
                await self.row_store.delete(event_id)
            except RowStoreError as exc:
                logger.error("Delete failed for %s: %s", event_id, exc)
                raise WriteFailure(DELETE_FAILED) from exc
            self._completion_stash.pop(event_id, None)
            logger.info("Maintenance window %s deleted", event_id)
            await self.fetch_all()
        return True

    async def toggle_complete(self, event: MaintenanceEvent) -> None:
        """Completed ↔ previous status. Only status and end_date are written.

        Completing stamps end_date with the clock. Reopening restores the
        status and end_date captured when this process completed the event;
        without that, it falls back to Scheduled and leaves end_date as it is.
        """
        if event.is_completed:
            status, end_date = self._completion_stash.get(
                event.id, (MaintenanceStatus.scheduled, event.end_date),
            )
        else:
            status, end_date = MaintenanceStatus.completed, to_iso(self.clock())

        patch = {"status": status.value, "end_date": end_date}
        async with self._syncing():
            try:
                await self.row_store.update(event.id, patch)
            except RowStoreError as exc:
                logger.error("Status toggle failed for %s: %s", event.id, exc)
                raise WriteFailure(TOGGLE_FAILED) from exc

            if event.is_completed:
                self._completion_stash.pop(event.id, None)
            else:
                self._completion_stash[event.id] = (event.status, event.end_date)
            logger.info("Maintenance window %s → %s", event.id, status.value)
            await self.fetch_all()
