# app/database.py
"""
Remote datastore client.

The service owns no database: users, customers and search logs live in a
hosted PostgreSQL exposed through PostgREST (Supabase). RemoteStore wraps the
generic table-level operations (select / count / insert / update / delete /
upsert) over one shared httpx.AsyncClient and turns every failure into an
app.errors.RemoteStoreError.
"""

from typing import Optional

import httpx

from app.config import settings
from app.errors import RemoteStoreError, normalize_remote_error, normalize_transport_error
from app.utils.logger import get_logger

logger = get_logger(__name__)

REST_PATH = "/rest/v1"


def eq(value) -> str:
    """PostgREST equality filter expression."""
    return f"eq.{value}"


class RemoteStore:
    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}{REST_PATH}",
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, table: str, context: str, params: Optional[dict] = None,
                       json=None, prefer: Optional[str] = None) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else {}
        try:
            response = await self.client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise normalize_transport_error(e, context) from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text or None
            raise normalize_remote_error(payload, response.status_code, context)
        return response

    # ── Reads ────────────────────────────────────────────────────────────────

    async def select(self, table: str, columns: str = "*", filters: Optional[dict] = None,
                     limit: Optional[int] = None) -> list[dict]:
        params = {"select": columns, **(filters or {})}
        if limit is not None:
            params["limit"] = str(limit)
        response = await self._request("GET", table, f"select {table}", params=params)
        return response.json() or []

    async def select_one(self, table: str, columns: str = "*", filters: Optional[dict] = None) -> Optional[dict]:
        rows = await self.select(table, columns, filters, limit=1)
        return rows[0] if rows else None

    async def count(self, table: str) -> int:
        response = await self._request("HEAD", table, f"count {table}",
                                       params={"select": "*"}, prefer="count=exact")
        # Content-Range: "0-24/3573" or "*/0"
        content_range = response.headers.get("content-range", "")
        total = content_range.rpartition("/")[2]
        return int(total) if total.isdigit() else 0

    async def probe(self, table: str) -> bool:
        """True if the table / view can be read right now."""
        try:
            await self._request("GET", table, f"probe {table}", params={"select": "*", "limit": "0"})
        except RemoteStoreError as e:
            logger.warning(f"Table '{table}' not readable: {e}")
            return False
        return True

    # ── Writes ───────────────────────────────────────────────────────────────

    async def insert(self, table: str, rows):
        await self._request("POST", table, f"insert {table}", json=rows, prefer="return=minimal")

    async def update(self, table: str, values: dict, filters: dict) -> list[dict]:
        """PATCH matching rows; returns the rows that were actually changed."""
        response = await self._request("PATCH", table, f"update {table}", params=filters,
                                       json=values, prefer="return=representation")
        return response.json() or []

    async def delete(self, table: str, filters: dict):
        await self._request("DELETE", table, f"delete {table}", params=filters, prefer="return=minimal")

    async def upsert(self, table: str, rows: list[dict], on_conflict: str):
        await self._request("POST", table, f"upsert {table}", params={"on_conflict": on_conflict},
                            json=rows, prefer="resolution=merge-duplicates,return=minimal")


store = RemoteStore(settings.SUPABASE_URL or "https://placeholder.supabase.co",
                    settings.SUPABASE_KEY or "placeholder",
                    timeout=settings.REMOTE_TIMEOUT_SECONDS)


def get_store() -> RemoteStore:
    """FastAPI dependency: the shared remote store client."""
    return store
