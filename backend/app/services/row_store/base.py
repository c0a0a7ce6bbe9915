"""Row store contract — the only thing the schedule needs from a backend.

One logical table, four operations. Rows are plain dicts with the
backend's own column names; shaping them is the normalizer's job.
"""

from __future__ import annotations

from typing import Any, Protocol

Row = dict[str, Any]


class RowStoreError(Exception):
    """Backend call failed. Transient and permanent failures are not told apart."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class RowStore(Protocol):
    async def select_all(self, order_by: str, ascending: bool = True) -> list[Row]: ...

    async def insert(self, row: Row) -> Row | None: ...

    async def update(self, row_id: str, row: Row) -> Row | None: ...

    async def delete(self, row_id: str) -> None: ...

    async def close(self) -> None: ...
