"""Row store backends for the maintenance schedule.

Entry point: build_row_store(). Picks the hosted PostgREST table or the
local SQL table from settings.ROW_STORE_BACKEND.
"""
import logging

from config import settings
from models.base import make_engine, make_session_factory
from services.row_store.base import Row, RowStore, RowStoreError
from services.row_store.rest import RestRowStore
from services.row_store.sql import SqlRowStore

logger = logging.getLogger("schedule.row_store")

__all__ = [
    "Row",
    "RowStore",
    "RowStoreError",
    "RestRowStore",
    "SqlRowStore",
    "build_row_store",
]


async def build_row_store() -> RowStore:
    backend = settings.ROW_STORE_BACKEND.lower()

    if backend == "rest":
        if not settings.SUPABASE_URL:
            raise RuntimeError("SUPABASE_URL is required for ROW_STORE_BACKEND=rest")
        logger.info(
            "Row store: PostgREST %s (table %s)",
            settings.SUPABASE_URL, settings.SUPABASE_TABLE,
        )
        return RestRowStore(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY,
            settings.SUPABASE_TABLE,
            timeout=settings.ROW_STORE_TIMEOUT,
        )

    if backend == "sql":
        engine = make_engine()
        store = SqlRowStore(engine, make_session_factory(engine))
        await store.ensure_schema()
        logger.info("Row store: SQL %s", engine.url.render_as_string(hide_password=True))
        return store

    raise RuntimeError(f"Unknown ROW_STORE_BACKEND: {settings.ROW_STORE_BACKEND!r}")
