"""Maintenance events table — self-hosted mirror of the hosted schedule table.

Same snake_case columns as the hosted backend so rows normalize identically.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class MaintenanceEventRow(Base):
    __tablename__ = "maintenance_events"

    __table_args__ = (
        Index("ix_maintenance_events_start_date", "start_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(Text, default="")
    system: Mapped[str] = mapped_column(String(100), default="")   # machine name: "CX", "Brausse 1"
    owner: Mapped[str] = mapped_column(String(100), default="")
    environment: Mapped[str] = mapped_column(String(30), default="Production")
    status: Mapped[str] = mapped_column(String(20), default="Scheduled")
    impact: Mapped[str] = mapped_column(String(10), default="Medium")
    notifications_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    description: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def to_row(self) -> dict:
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        return f"<MaintenanceEventRow {self.system}: {self.title[:30]}>"
