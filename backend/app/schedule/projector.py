"""View projector — derived dashboard views over the current event list.

Pure functions: nothing here touches the store, so every view can be
recomputed from ``store.events`` at any time.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime

from pydantic import BaseModel

from schedule.clock import parse_iso, schedule_tz
from schedule.models import ImpactLevel, MaintenanceEvent, MaintenanceStatus

DAY_NAMES_ID = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")
MONTH_NAMES_ID = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)

# Health score: 78 + coverage/5 + completed%/8 - 3 per active window
HEALTH_BASE = 78
HEALTH_COVERAGE_DIVISOR = 5
HEALTH_COMPLETED_DIVISOR = 8
HEALTH_ACTIVE_PENALTY = 3


class DayGroup(BaseModel):
    key: str
    label: str
    items: list[MaintenanceEvent] = []


class ScheduleStats(BaseModel):
    total: int
    active_windows: int
    completed_count: int
    high_impact: int
    total_machines: int
    notifications_coverage: int    # percent
    completed_percentage: int      # percent
    health_score: int


class DashboardView(BaseModel):
    stats: ScheduleStats
    groups: list[DayGroup]
    completed: list[MaintenanceEvent] = []


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def _local(iso: str) -> datetime | None:
    parsed = parse_iso(iso)
    if parsed is None:
        return None
    return parsed.astimezone(schedule_tz())


def date_key(iso: str) -> str:
    """yyyy-MM-dd in the schedule timezone; the raw string when unparseable."""
    local = _local(iso)
    return local.strftime("%Y-%m-%d") if local else iso


def format_day_label(iso: str) -> str:
    """Long Indonesian date, e.g. "Sabtu, 1 Juni 2024"; the raw string when unparseable."""
    local = _local(iso)
    if local is None:
        return iso
    return (
        f"{DAY_NAMES_ID[local.weekday()]}, "
        f"{local.day} {MONTH_NAMES_ID[local.month - 1]} {local.year}"
    )


# ---------------------------------------------------------------------------
# Ordering, grouping, partitioning
# ---------------------------------------------------------------------------

def sort_chronological(events: Iterable[MaintenanceEvent]) -> list[MaintenanceEvent]:
    """Stable sort by start date; unparseable dates go last in their original order."""
    def key(event: MaintenanceEvent) -> tuple[int, float]:
        parsed = parse_iso(event.start_date)
        if parsed is None:
            return (1, 0.0)
        return (0, parsed.timestamp())

    return sorted(events, key=key)


def group_by_day(events: Iterable[MaintenanceEvent]) -> list[DayGroup]:
    groups: dict[str, DayGroup] = {}
    for event in sort_chronological(events):
        key = date_key(event.start_date)
        group = groups.get(key)
        if group is None:
            group = groups[key] = DayGroup(key=key, label=format_day_label(event.start_date))
        group.items.append(event)
    return list(groups.values())


def partition(
    events: Iterable[MaintenanceEvent],
) -> tuple[list[MaintenanceEvent], list[MaintenanceEvent]]:
    """(active, completed), both in chronological order."""
    active: list[MaintenanceEvent] = []
    completed: list[MaintenanceEvent] = []
    for event in sort_chronological(events):
        (completed if event.is_completed else active).append(event)
    return active, completed


def job_detail(event: MaintenanceEvent) -> str:
    """Text shown in the "Detail Pekerjaan" column."""
    return (event.description.strip() or event.title).strip()


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def percentage(part: int, total: int) -> int:
    return round_half_up(part / max(total, 1) * 100)


def health_score(active_windows: int, coverage: float, completed_percentage: float) -> int:
    raw = (
        HEALTH_BASE
        + coverage / HEALTH_COVERAGE_DIVISOR
        + completed_percentage / HEALTH_COMPLETED_DIVISOR
        - active_windows * HEALTH_ACTIVE_PENALTY
    )
    return max(0, min(100, round_half_up(raw)))


def count_machines(events: Iterable[MaintenanceEvent]) -> int:
    return len({e.system.strip() for e in events if e.system.strip()})


def compute_stats(events: Sequence[MaintenanceEvent]) -> ScheduleStats:
    total = len(events)
    completed = sum(1 for e in events if e.status == MaintenanceStatus.completed)
    active = total - completed
    notified = sum(1 for e in events if e.notifications_sent)

    coverage = percentage(notified, total)
    completed_pct = percentage(completed, total)

    return ScheduleStats(
        total=total,
        active_windows=active,
        completed_count=completed,
        high_impact=sum(1 for e in events if e.impact == ImpactLevel.high),
        total_machines=count_machines(events),
        notifications_coverage=coverage,
        completed_percentage=completed_pct,
        health_score=health_score(active, coverage, completed_pct),
    )


def build_dashboard(
    events: Sequence[MaintenanceEvent], split_completed: bool = False,
) -> DashboardView:
    """Stats plus day groups.

    With ``split_completed`` only active events are grouped by day and
    completed ones are listed flat, oldest first.
    """
    if split_completed:
        active, completed = partition(events)
        groups = group_by_day(active)
    else:
        completed = []
        groups = group_by_day(events)
    return DashboardView(stats=compute_stats(events), groups=groups, completed=completed)
