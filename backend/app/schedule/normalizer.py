"""Row normalizer — backend rows of any known shape → MaintenanceEvent.

Rows arrive snake_case from the hosted backend, camelCase from older
exports, and some legacy rows still carry ``machine`` instead of
``system``. For each field the first alias holding a non-None value wins.

Missing timestamps fall back to the clock's current instant. This is an
intentional fallback, not an error, and it makes normalization depend on
the time of the call.

Values of the wrong type are rejected with RowParseError instead of being
coerced; the store decides what to do with a rejected row.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from schedule.clock import Clock, to_iso, utc_now
from schedule.models import MaintenanceEvent

ID_KEYS = ("id", "uuid")
SYSTEM_KEYS = ("system", "machine")
NOTIFICATIONS_KEYS = ("notifications_sent", "notificationsSent")
START_KEYS = ("start_date", "startDate")
END_KEYS = ("end_date", "endDate") + START_KEYS
CREATED_KEYS = ("created_at", "createdAt")


class RowParseError(ValueError):
    """Backend row that cannot become a MaintenanceEvent."""

    def __init__(self, row_id: str | None, fields: list[str], message: str):
        self.row_id = row_id
        self.fields = fields
        super().__init__(f"row {row_id or '?'}: {message}")


def first_present(row: Mapping[str, Any], keys: tuple[str, ...], default: Any = None) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return default


def _timestamp(value: Any) -> Any:
    # SQL backends hand back datetimes, naive ones (SQLite) holding UTC wall time
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return to_iso(value)
    return value


def normalize_row(row: Mapping[str, Any], clock: Clock = utc_now) -> MaintenanceEvent:
    if not isinstance(row, Mapping):
        raise RowParseError(None, [], f"expected a mapping, got {type(row).__name__}")

    raw_id = first_present(row, ID_KEYS, "")
    # ids are opaque; integer primary keys are carried as text
    row_id = str(raw_id) if isinstance(raw_id, int) and not isinstance(raw_id, bool) else raw_id

    now = to_iso(clock())
    data = {
        "id": row_id,
        "title": first_present(row, ("title",), ""),
        "system": first_present(row, SYSTEM_KEYS, ""),
        "owner": first_present(row, ("owner",), ""),
        "environment": first_present(row, ("environment",), "Production"),
        "status": first_present(row, ("status",), "Scheduled"),
        "impact": first_present(row, ("impact",), "Medium"),
        "notifications_sent": first_present(row, NOTIFICATIONS_KEYS, False),
        "start_date": _timestamp(first_present(row, START_KEYS, now)),
        "end_date": _timestamp(first_present(row, END_KEYS, now)),
        "description": first_present(row, ("description",), ""),
        "created_at": _timestamp(first_present(row, CREATED_KEYS, now)),
    }

    try:
        return MaintenanceEvent(**data)
    except ValidationError as exc:
        fields = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise RowParseError(
            row_id if isinstance(row_id, str) else None,
            fields,
            "invalid " + ", ".join(fields),
        ) from exc


def normalize_rows(
    rows: list[Mapping[str, Any]], clock: Clock = utc_now,
) -> tuple[list[MaintenanceEvent], list[RowParseError]]:
    """Normalize a batch, collecting rejected rows instead of stopping."""
    events: list[MaintenanceEvent] = []
    rejected: list[RowParseError] = []
    for row in rows:
        try:
            events.append(normalize_row(row, clock))
        except RowParseError as exc:
            rejected.append(exc)
    return events, rejected
