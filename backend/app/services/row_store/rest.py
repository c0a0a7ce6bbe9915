"""PostgREST row store (the hosted Supabase table).

Responsibilities:
- HTTP requests to <url>/rest/v1/<table>
- apikey / bearer auth headers
- Mapping HTTP and transport errors to RowStoreError
- Logging all calls

No retries: a failed call is reported once and the user retries the action.
Does NOT know about maintenance events.
"""

from __future__ import annotations

import logging

import httpx

from services.row_store.base import Row, RowStoreError

logger = logging.getLogger("schedule.row_store.rest")


class RestRowStore:

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.table = table
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _request(
        self,
        operation: str,
        method: str,
        params: dict | None = None,
        json: Row | None = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = await self._client.request(
                method, f"/{self.table}", params=params, json=json, headers=headers,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:200]
            logger.error(
                "Row store %s failed: HTTP %d %s",
                operation, exc.response.status_code, body,
            )
            raise RowStoreError(operation, f"HTTP {exc.response.status_code}: {body}") from exc
        except httpx.HTTPError as exc:
            logger.error("Row store %s failed: %s", operation, exc)
            raise RowStoreError(operation, str(exc) or type(exc).__name__) from exc

        logger.debug("Row store %s → HTTP %d", operation, resp.status_code)
        return resp

    @staticmethod
    def _first(resp: httpx.Response) -> Row | None:
        if not resp.content:
            return None
        data = resp.json()
        if isinstance(data, list):
            return data[0] if data else None
        return data

    async def select_all(self, order_by: str, ascending: bool = True) -> list[Row]:
        direction = "asc" if ascending else "desc"
        resp = await self._request(
            "select", "GET", params={"select": "*", "order": f"{order_by}.{direction}"},
        )
        data = resp.json()
        if not isinstance(data, list):
            raise RowStoreError("select", f"expected a list, got {type(data).__name__}")
        return data

    async def insert(self, row: Row) -> Row | None:
        resp = await self._request("insert", "POST", json=row, prefer="return=representation")
        return self._first(resp)

    async def update(self, row_id: str, row: Row) -> Row | None:
        resp = await self._request(
            "update", "PATCH",
            params={"id": f"eq.{row_id}"},
            json=row,
            prefer="return=representation",
        )
        return self._first(resp)

    async def delete(self, row_id: str) -> None:
        await self._request("delete", "DELETE", params={"id": f"eq.{row_id}"})

    async def close(self) -> None:
        await self._client.aclose()
