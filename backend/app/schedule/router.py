"""Maintenance schedule API — dashboard views, passcode gate, write actions.

GET    /api/schedule/events               — canonical events, chronological
GET    /api/schedule/dashboard            — stats + day groups (+ completed list)
GET    /api/schedule/machines             — machine quick-pick list
POST   /api/schedule/refresh              — reload from the backend
GET    /api/schedule/access               — gate state
POST   /api/schedule/access/login         — unlock write actions
POST   /api/schedule/access/logout
POST   /api/schedule/events               — create (through the form controller)
PUT    /api/schedule/events/{id}          — edit (through the form controller)
POST   /api/schedule/events/{id}/toggle   — Completed ↔ previous status
DELETE /api/schedule/events/{id}?confirm=true
"""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from schedule.form import FormController
from schedule.gate import AccessDenied, AccessGate
from schedule.models import (
    MACHINE_OPTIONS,
    Environment,
    ImpactLevel,
    MaintenanceEvent,
    MaintenanceStatus,
)
from schedule.projector import DashboardView, build_dashboard, sort_chronological
from schedule.store import CONFIRM_DELETE, EventStore, LoadFailure, SyncInProgress, WriteFailure

router = APIRouter(prefix="/api/schedule", tags=["schedule"])

LOGIN_OK = "Login berhasil. Anda dapat membuka Jadwalkan Maint."
LOGIN_FAILED = "Password salah."


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class DraftIn(BaseModel):
    title: str | None = None
    system: str | None = None
    owner: str | None = None
    environment: Environment | None = None
    status: MaintenanceStatus | None = None
    impact: ImpactLevel | None = None
    notifications_sent: bool | None = None
    start_date: str | None = None
    work_date: date | None = None     # date-only input, becomes 09:00 local
    description: str | None = None


class DashboardOut(DashboardView):
    is_loading: bool
    is_syncing: bool
    is_authenticated: bool
    error_message: str = ""
    skipped_rows: int = 0


class LoginIn(BaseModel):
    passcode: str


class AccessOut(BaseModel):
    authenticated: bool
    message: str = ""


# ---------------------------------------------------------------------------
# Dependencies & helpers
# ---------------------------------------------------------------------------

def get_store(request: Request) -> EventStore:
    return request.app.state.event_store


def get_gate(request: Request) -> AccessGate:
    return request.app.state.access_gate


def require_access(gate: AccessGate = Depends(get_gate)) -> AccessGate:
    try:
        gate.require()
    except AccessDenied as exc:
        raise HTTPException(403, str(exc))
    return gate


def _write_error(exc: WriteFailure) -> HTTPException:
    if isinstance(exc, SyncInProgress):
        return HTTPException(409, str(exc))
    return HTTPException(502, str(exc))


def _find(store: EventStore, event_id: str) -> MaintenanceEvent:
    event = store.get(event_id)
    if not event:
        raise HTTPException(404, "Event not found")
    return event


async def _submit(form: FormController, data: DraftIn, store: EventStore) -> list[MaintenanceEvent]:
    fields = data.model_dump(exclude_none=True, exclude={"work_date"})
    form.update_fields(**fields)
    if data.work_date is not None:
        form.set_work_date(data.work_date)

    if not await form.submit(store):
        if form.error:
            raise HTTPException(422, form.error)
        raise _write_error(form.failure)
    return sort_chronological(store.events)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

@router.get("/events", response_model=list[MaintenanceEvent])
async def list_events(store: EventStore = Depends(get_store)):
    return sort_chronological(store.events)


@router.get("/dashboard", response_model=DashboardOut)
async def get_dashboard(
    split_completed: bool = Query(False),
    store: EventStore = Depends(get_store),
    gate: AccessGate = Depends(get_gate),
):
    state = store.state
    view = build_dashboard(state.events, split_completed=split_completed)
    return DashboardOut(
        **view.model_dump(),
        is_loading=state.is_loading,
        is_syncing=state.is_syncing,
        is_authenticated=gate.is_authenticated,
        error_message=state.error_message,
        skipped_rows=state.skipped_rows,
    )


@router.get("/machines", response_model=list[str])
async def list_machines():
    return list(MACHINE_OPTIONS)


@router.post("/refresh", response_model=list[MaintenanceEvent])
async def refresh(store: EventStore = Depends(get_store)):
    try:
        await store.fetch_all(raise_errors=True)
    except LoadFailure as exc:
        raise HTTPException(502, str(exc))
    return sort_chronological(store.events)


# ---------------------------------------------------------------------------
# Access gate
# ---------------------------------------------------------------------------

@router.get("/access", response_model=AccessOut)
async def access_state(gate: AccessGate = Depends(get_gate)):
    return AccessOut(authenticated=gate.is_authenticated)


@router.post("/access/login", response_model=AccessOut)
async def login(data: LoginIn, gate: AccessGate = Depends(get_gate)):
    if not gate.attempt_login(data.passcode):
        raise HTTPException(401, LOGIN_FAILED)
    return AccessOut(authenticated=True, message=LOGIN_OK)


@router.post("/access/logout", response_model=AccessOut)
async def logout(gate: AccessGate = Depends(get_gate)):
    gate.logout()
    return AccessOut(authenticated=False)


# ---------------------------------------------------------------------------
# Writes (gated)
# ---------------------------------------------------------------------------

@router.post(
    "/events",
    response_model=list[MaintenanceEvent],
    status_code=201,
    dependencies=[Depends(require_access)],
)
async def create_event(data: DraftIn, store: EventStore = Depends(get_store)):
    form = FormController.for_create(store.clock)
    return await _submit(form, data, store)


@router.put(
    "/events/{event_id}",
    response_model=list[MaintenanceEvent],
    dependencies=[Depends(require_access)],
)
async def update_event(event_id: str, data: DraftIn, store: EventStore = Depends(get_store)):
    form = FormController.for_edit(_find(store, event_id), store.clock)
    return await _submit(form, data, store)


@router.post(
    "/events/{event_id}/toggle",
    response_model=list[MaintenanceEvent],
    dependencies=[Depends(require_access)],
)
async def toggle_event(event_id: str, store: EventStore = Depends(get_store)):
    event = _find(store, event_id)
    try:
        await store.toggle_complete(event)
    except WriteFailure as exc:
        raise _write_error(exc)
    return sort_chronological(store.events)


@router.delete(
    "/events/{event_id}",
    status_code=204,
    dependencies=[Depends(require_access)],
)
async def delete_event(
    event_id: str,
    confirm: bool = Query(False),
    store: EventStore = Depends(get_store),
):
    _find(store, event_id)
    try:
        deleted = await store.delete(event_id, lambda _prompt: confirm)
    except WriteFailure as exc:
        raise _write_error(exc)
    if not deleted:
        raise HTTPException(409, CONFIRM_DELETE)
