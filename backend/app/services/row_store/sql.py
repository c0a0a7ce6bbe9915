"""SQLAlchemy row store over the local maintenance_events table."""

from __future__ import annotations

import logging
from datetime import timezone

from sqlalchemy import asc, delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from models.base import Base
from models.maintenance_event import MaintenanceEventRow
from schedule.clock import parse_iso
from services.row_store.base import Row, RowStoreError

logger = logging.getLogger("schedule.row_store.sql")

DATE_COLUMNS = ("start_date", "end_date")


def _bind_values(row: Row) -> Row:
    """Only known columns; ISO strings for timestamp columns become UTC datetimes."""
    columns = MaintenanceEventRow.__table__.columns.keys()
    values: Row = {}
    for key, value in row.items():
        if key not in columns or key in ("id", "created_at"):
            continue
        if key in DATE_COLUMNS and isinstance(value, str):
            parsed = parse_iso(value)
            if parsed is None:
                raise RowStoreError("bind", f"{key} is not an ISO timestamp: {value!r}")
            value = parsed.astimezone(timezone.utc)
        values[key] = value
    return values


class SqlRowStore:

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.engine = engine
        self.session_factory = session_factory

    async def ensure_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("maintenance_events table ready")

    async def select_all(self, order_by: str, ascending: bool = True) -> list[Row]:
        column = getattr(MaintenanceEventRow, order_by, None)
        if column is None:
            raise RowStoreError("select", f"unknown column {order_by}")
        stmt = select(MaintenanceEventRow).order_by(asc(column) if ascending else desc(column))
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [obj.to_row() for obj in result.scalars().all()]
        except SQLAlchemyError as exc:
            logger.error("Row store select failed: %s", exc)
            raise RowStoreError("select", str(exc)) from exc

    async def insert(self, row: Row) -> Row | None:
        obj = MaintenanceEventRow(**_bind_values(row))
        try:
            async with self.session_factory() as session:
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
                return obj.to_row()
        except SQLAlchemyError as exc:
            logger.error("Row store insert failed: %s", exc)
            raise RowStoreError("insert", str(exc)) from exc

    async def update(self, row_id: str, row: Row) -> Row | None:
        values = _bind_values(row)
        try:
            async with self.session_factory() as session:
                if values:
                    await session.execute(
                        update(MaintenanceEventRow)
                        .where(MaintenanceEventRow.id == row_id)
                        .values(**values)
                    )
                    await session.commit()
                obj = await session.get(MaintenanceEventRow, row_id)
                return obj.to_row() if obj else None
        except SQLAlchemyError as exc:
            logger.error("Row store update failed: %s", exc)
            raise RowStoreError("update", str(exc)) from exc

    async def delete(self, row_id: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(
                    delete(MaintenanceEventRow).where(MaintenanceEventRow.id == row_id)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Row store delete failed: %s", exc)
            raise RowStoreError("delete", str(exc)) from exc

    async def close(self) -> None:
        await self.engine.dispose()
