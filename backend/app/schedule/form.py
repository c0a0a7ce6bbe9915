"""Form controller — create/edit lifecycle of one maintenance draft.

The mode is fixed when the controller is built: ``for_create`` starts from
a blank draft dated today 09:00, ``for_edit`` copies an existing event
(minus created_at). Nothing is written locally; the store's reload is the
only thing that changes the schedule.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from schedule.clock import Clock, today_work_start, utc_now, work_start
from schedule.models import MaintenanceDraft, MaintenanceEvent
from schedule.store import EventStore, WriteFailure

logger = logging.getLogger("schedule.form")

REQUIRED_FIELDS_MISSING = "Detail pekerjaan dan nama mesin wajib diisi."

EDITABLE_FIELDS = frozenset(MaintenanceDraft.model_fields) - {"id"}


class ValidationFailure(ValueError):
    """Draft failed local checks; nothing was sent to the backend."""


class FormController:

    def __init__(self, draft: MaintenanceDraft, clock: Clock = utc_now):
        self.draft: MaintenanceDraft | None = draft
        self.clock = clock
        self.error = ""       # inline validation message
        self.alert = ""       # last write failure shown to the user
        self.failure: WriteFailure | None = None

    @classmethod
    def for_create(cls, clock: Clock = utc_now) -> FormController:
        start = today_work_start(clock)
        return cls(MaintenanceDraft(start_date=start, end_date=start), clock)

    @classmethod
    def for_edit(cls, event: MaintenanceEvent, clock: Clock = utc_now) -> FormController:
        return cls(MaintenanceDraft.from_event(event), clock)

    @property
    def is_open(self) -> bool:
        return self.draft is not None

    @property
    def is_edit(self) -> bool:
        return self.draft is not None and self.draft.is_update

    def _require_open(self) -> MaintenanceDraft:
        if self.draft is None:
            raise RuntimeError("form is closed")
        return self.draft

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------

    def update_field(self, name: str, value: Any) -> None:
        draft = self._require_open()
        if name not in EDITABLE_FIELDS:
            raise KeyError(f"not an editable field: {name}")
        setattr(draft, name, value)
        if name == "start_date":
            # end date is never set on its own; it follows the start date
            draft.end_date = draft.start_date

    def update_fields(self, **values: Any) -> None:
        # start_date last so its end_date mirror wins over any end_date given
        for name in sorted(values, key=lambda n: n == "start_date"):
            self.update_field(name, values[name])

    def set_job_detail(self, text: str) -> None:
        """The job detail text box writes title and description together."""
        self.update_field("title", text)
        self.update_field("description", text)

    def set_work_date(self, value: str | date | None) -> None:
        """Date-only input; the window starts at 09:00 local, blank means today."""
        if not value:
            start = today_work_start(self.clock)
        elif isinstance(value, date):
            start = work_start(value)
        else:
            start = work_start(date.fromisoformat(value))
        self.update_field("start_date", start)

    # ------------------------------------------------------------------
    # Submit / close
    # ------------------------------------------------------------------

    def validate(self) -> MaintenanceDraft:
        """Checked copy of the draft ready for the store."""
        draft = self._require_open()
        if not draft.title.strip() or not draft.system.strip():
            raise ValidationFailure(REQUIRED_FIELDS_MISSING)
        description = draft.description if draft.description.strip() else draft.title
        return draft.model_copy(update={"description": description})

    async def submit(self, store: EventStore) -> bool:
        """Validate and save. True closes the form; False leaves the draft as it was."""
        try:
            payload = self.validate()
        except ValidationFailure as exc:
            self.error = str(exc)
            return False
        self.error = ""

        try:
            await store.save(payload)
        except WriteFailure as exc:
            self.alert = str(exc)
            self.failure = exc
            logger.warning("Form submit failed, draft kept: %s", exc)
            return False

        self.alert = ""
        self.failure = None
        self.close()
        return True

    def close(self) -> None:
        self.draft = None
        self.error = ""
