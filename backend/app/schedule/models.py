"""Maintenance schedule — canonical event record and form draft."""

from __future__ import annotations

import enum

from pydantic import BaseModel, StrictBool, StrictStr


class Environment(str, enum.Enum):
    production = "Production"
    staging = "Staging"
    disaster_recovery = "Disaster Recovery"


class MaintenanceStatus(str, enum.Enum):
    scheduled = "Scheduled"
    in_progress = "In Progress"
    completed = "Completed"


class ImpactLevel(str, enum.Enum):
    low = "Low"
    medium = "Medium"
    high = "High"


# Quick-pick list of the form's machine selector; free text is still allowed.
MACHINE_OPTIONS: tuple[str, ...] = (
    "CX",
    "XL",
    "CD3",
    "CDLL",
    "ATN",
    "Brausse 1",
    "Brausse 2",
    "Brausse 3",
    "Brausse 5",
    "Brausse 6",
    "Brausse 7",
    "CER",
    "Spanthera",
    "SP 106",
    "SP 104 ER",
    "Jinyue 1",
    "Jinyue 2",
    "Jinyue 3",
    "Champion",
    "Diana",
    "FS 1",
    "FS 2",
    "FS 3",
    "FS 4",
    "Genset P1",
    "Genset P2",
    "VisionCut 01",
    "VisionCut 02",
    "Sun Dragon",
    "Omega",
    "Other",
    "SP104 Kanguru",
    "Plotter",
    "Pile Turner 1",
    "Pile Turner 2",
    "MBO",
    "SM74",
)

# Backend columns written on insert/update (id and created_at are backend-owned)
WRITABLE_COLUMNS: tuple[str, ...] = (
    "title",
    "system",
    "owner",
    "environment",
    "status",
    "impact",
    "notifications_sent",
    "start_date",
    "end_date",
    "description",
)


class MaintenanceEvent(BaseModel):
    """One maintenance window as held by the store. Replace, never mutate."""

    id: StrictStr
    title: StrictStr
    system: StrictStr
    owner: StrictStr = ""
    environment: Environment = Environment.production
    status: MaintenanceStatus = MaintenanceStatus.scheduled
    impact: ImpactLevel = ImpactLevel.medium
    notifications_sent: StrictBool = False
    start_date: StrictStr
    end_date: StrictStr
    description: StrictStr = ""
    created_at: StrictStr

    model_config = {"frozen": True}

    @property
    def is_completed(self) -> bool:
        return self.status == MaintenanceStatus.completed


class MaintenanceDraft(BaseModel):
    """An event under edit. ``id`` set means update, absent means create."""

    id: str | None = None
    title: str = ""
    system: str = ""
    owner: str = ""
    environment: Environment = Environment.production
    status: MaintenanceStatus = MaintenanceStatus.scheduled
    impact: ImpactLevel = ImpactLevel.medium
    notifications_sent: bool = False
    start_date: str
    end_date: str
    description: str = ""

    model_config = {"validate_assignment": True}

    @property
    def is_update(self) -> bool:
        return bool(self.id)

    @classmethod
    def from_event(cls, event: MaintenanceEvent) -> MaintenanceDraft:
        return cls(**event.model_dump(exclude={"created_at"}))


def draft_to_row(draft: MaintenanceDraft) -> dict:
    """Backend row (snake_case columns) for every draft field except ``id``."""
    data = draft.model_dump(mode="json", include=set(WRITABLE_COLUMNS))
    return {column: data[column] for column in WRITABLE_COLUMNS}
