"""Clock collaborator and ISO-8601 helpers shared by the schedule module."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from config import settings

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def schedule_tz() -> ZoneInfo:
    return ZoneInfo(settings.SCHEDULE_TIMEZONE)


def to_iso(moment: datetime) -> str:
    """Render like the browser's toISOString: UTC, millisecond precision, 'Z'."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=schedule_tz())
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are read in the schedule timezone."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=schedule_tz())
    return parsed


def work_start(day: date, hour: int | None = None) -> str:
    """ISO timestamp for the start of a working day (09:00 local by default)."""
    if hour is None:
        hour = settings.WORK_START_HOUR
    local = datetime.combine(day, time(hour=hour), tzinfo=schedule_tz())
    return to_iso(local)


def today_work_start(clock: Clock = utc_now) -> str:
    return work_start(clock().astimezone(schedule_tz()).date())
