"""Unit tests for the form controller."""

from datetime import date

import pytest

from schedule.form import REQUIRED_FIELDS_MISSING, FormController, ValidationFailure
from schedule.models import ImpactLevel
from schedule.store import SAVE_FAILED


class TestLifecycle:

    def test_create_mode_starts_blank_today_at_nine(self, clock):
        form = FormController.for_create(clock)
        # 01:00 UTC is 08:00 in Jakarta; the window starts 09:00 local
        assert form.draft.start_date == "2024-06-01T02:00:00.000Z"
        assert form.draft.end_date == form.draft.start_date
        assert form.draft.id is None
        assert form.draft.title == ""
        assert form.is_open and not form.is_edit

    def test_edit_mode_copies_event_without_created_at(self, make_event, clock):
        form = FormController.for_edit(make_event(id="evt-a", impact="High"), clock)
        assert form.is_edit
        assert form.draft.id == "evt-a"
        assert form.draft.impact == ImpactLevel.high
        assert "created_at" not in form.draft.model_dump()

    def test_close_discards_draft(self, clock):
        form = FormController.for_create(clock)
        form.update_field("title", "half typed")
        form.close()
        assert form.draft is None
        assert not form.is_open


class TestFieldEdits:

    def test_start_date_edit_overwrites_end_date(self, clock):
        form = FormController.for_create(clock)
        form.update_field("start_date", "2024-06-05T02:00:00.000Z")
        assert form.draft.end_date == "2024-06-05T02:00:00.000Z"

    def test_start_date_wins_over_end_date_in_bulk_edit(self, clock):
        form = FormController.for_create(clock)
        form.update_fields(
            start_date="2024-06-05T02:00:00.000Z",
            end_date="2024-06-09T02:00:00.000Z",
        )
        assert form.draft.end_date == "2024-06-05T02:00:00.000Z"

    def test_work_date_input_means_nine_local(self, clock):
        form = FormController.for_create(clock)
        form.set_work_date("2024-06-03")
        assert form.draft.start_date == "2024-06-03T02:00:00.000Z"
        form.set_work_date(date(2024, 6, 4))
        assert form.draft.end_date == "2024-06-04T02:00:00.000Z"

    def test_blank_work_date_means_today(self, clock):
        form = FormController.for_create(clock)
        form.set_work_date("2024-06-03")
        form.set_work_date("")
        assert form.draft.start_date == "2024-06-01T02:00:00.000Z"

    def test_job_detail_sets_title_and_description(self, clock):
        form = FormController.for_create(clock)
        form.set_job_detail("Kalibrasi sensor")
        assert form.draft.title == "Kalibrasi sensor"
        assert form.draft.description == "Kalibrasi sensor"

    def test_id_is_not_editable(self, clock):
        form = FormController.for_create(clock)
        with pytest.raises(KeyError):
            form.update_field("id", "forged")

    def test_edit_after_close_fails(self, clock):
        form = FormController.for_create(clock)
        form.close()
        with pytest.raises(RuntimeError):
            form.update_field("title", "late")


class TestSubmit:

    async def test_missing_title_makes_no_remote_call(self, store, row_store, clock):
        form = FormController.for_create(clock)
        form.update_fields(title="", system="CX")

        assert await form.submit(store) is False
        assert row_store.calls == []
        assert form.error == REQUIRED_FIELDS_MISSING
        assert form.draft.system == "CX"

    async def test_whitespace_system_fails_validation(self, clock):
        form = FormController.for_create(clock)
        form.update_fields(title="Ganti oli", system="   ")
        with pytest.raises(ValidationFailure):
            form.validate()

    async def test_blank_description_defaults_to_title(self, store, row_store, clock):
        form = FormController.for_create(clock)
        form.update_fields(title="Ganti oli", system="CX", description="")

        assert await form.submit(store) is True

        _, row = row_store.writes[0]
        assert row["description"] == "Ganti oli"
        assert store.events[0].description == "Ganti oli"
        assert form.draft is None

    async def test_edit_submits_update(self, store, row_store, make_row, clock):
        row_store.rows = [make_row(id="evt-a")]
        await store.fetch_all()

        form = FormController.for_edit(store.get("evt-a"), clock)
        form.update_field("impact", "High")
        assert await form.submit(store) is True

        op, row_id, row = row_store.writes[0]
        assert (op, row_id, row["impact"]) == ("update", "evt-a", "High")

    async def test_write_failure_keeps_draft(self, store, row_store, clock):
        row_store.fail_on.add("insert")
        form = FormController.for_create(clock)
        form.update_fields(title="Ganti oli", system="CX")
        before = form.draft.model_copy()

        assert await form.submit(store) is False
        assert form.is_open
        assert form.draft == before
        assert form.alert == SAVE_FAILED
        assert form.error == ""

        row_store.fail_on.clear()
        assert await form.submit(store) is True
        assert form.alert == ""
