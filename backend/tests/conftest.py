"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from schedule.gate import AccessGate
from schedule.models import MaintenanceEvent
from schedule.store import EventStore
from services.row_store.base import RowStoreError


class FakeClock:
    """Clock collaborator frozen at a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeRowStore:
    """In-memory row store that records every call and can simulate outages."""

    def __init__(self, rows=None):
        self.rows = [dict(r) for r in rows or []]
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self._next_id = 1

    @property
    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] != "select"]

    def _check(self, *call) -> None:
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise RowStoreError(call[0], "simulated outage")

    async def select_all(self, order_by, ascending=True):
        self._check("select", order_by, ascending)
        rows = sorted(self.rows, key=lambda r: str(r.get(order_by) or ""), reverse=not ascending)
        return [dict(r) for r in rows]

    async def insert(self, row):
        self._check("insert", dict(row))
        new = dict(row, id=f"evt-{self._next_id}", created_at="2024-05-01T00:00:00.000Z")
        self._next_id += 1
        self.rows.append(new)
        return dict(new)

    async def update(self, row_id, row):
        self._check("update", row_id, dict(row))
        for existing in self.rows:
            if existing.get("id") == row_id:
                existing.update(row)
                return dict(existing)
        return None

    async def delete(self, row_id):
        self._check("delete", row_id)
        self.rows = [r for r in self.rows if r.get("id") != row_id]

    async def close(self):
        pass


def backend_row(**overrides) -> dict:
    row = {
        "id": "evt-a",
        "title": "Ganti oli",
        "system": "CX",
        "owner": "",
        "environment": "Production",
        "status": "Scheduled",
        "impact": "Medium",
        "notifications_sent": False,
        "start_date": "2024-06-01T02:00:00.000Z",
        "end_date": "2024-06-01T02:00:00.000Z",
        "description": "",
        "created_at": "2024-05-20T10:00:00.000Z",
    }
    row.update(overrides)
    return row


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 1, 1, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_row():
    return backend_row


@pytest.fixture
def make_event():
    def factory(**overrides) -> MaintenanceEvent:
        data = backend_row(**overrides)
        return MaintenanceEvent(**data)

    return factory


@pytest.fixture
def row_store():
    return FakeRowStore()


@pytest.fixture
def store(row_store, clock):
    return EventStore(row_store, clock)


@pytest.fixture
def gate():
    return AccessGate("6666")
