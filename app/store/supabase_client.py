"""Reelpulse — Supabase (PostgREST) Record Store.

Reads the deduplicated post performance view over the REST API.
Handles authentication headers, predicate encoding and pagination.
Failures are surfaced as StoreError without retry.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.config import settings
from app.models.post_models import PostRecord
from app.store.base_store import PostStore, StoreError
from app.core.logging import get_logger

logger = get_logger("store.supabase")

MAX_PAGES = 200


def _quote(value: str) -> str:
    """Quote a value for a PostgREST `in.(...)` list."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_filters(
    start_date: Optional[date] = None, brands: Optional[Sequence[str]] = None
) -> Dict[str, str]:
    """Translate store predicates into PostgREST query params."""
    params: Dict[str, str] = {"select": "*", "order": "id.asc"}
    if start_date is not None:
        params["date_posted"] = f"gte.{start_date.isoformat()}"
    if brands:
        params["brand"] = "in.(" + ",".join(_quote(b) for b in brands) + ")"
    return params


def _error_message(e: httpx.HTTPStatusError) -> str:
    """PostgREST error `message`, or the status line when the body is unusable."""
    if not e.response.headers.get("content-type", "").startswith("application/json"):
        return str(e)
    try:
        body = e.response.json()
    except ValueError:
        return str(e)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(e)


class SupabaseStore(PostStore):
    """Async PostgREST client for the post performance view."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        table: str | None = None,
        page_size: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key or settings.supabase_key
        self.table = table or settings.store_table
        self.page_size = page_size or settings.store_page_size
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.store_timeout,
                transport=self._transport,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ── Core Request Method ──

    async def _request(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """GET one page of rows."""
        client = await self._get_client()
        try:
            resp = await client.get(self.endpoint, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(_error_message(e), e.response.status_code) from e
        except httpx.RequestError as e:
            raise StoreError(f"Store connection failed: {e}") from e

        try:
            rows = resp.json()
        except ValueError as e:
            raise StoreError(
                f"Store returned a non-JSON body: {e}", resp.status_code
            ) from e
        if not isinstance(rows, list):
            raise StoreError("Store returned an unexpected payload", resp.status_code)
        return rows

    # ── Pagination ──

    async def fetch_posts(
        self,
        start_date: Optional[date] = None,
        brands: Optional[Sequence[str]] = None,
    ) -> List[PostRecord]:
        """Fetch all matching rows, page by page."""
        if not self.base_url:
            raise StoreError("SUPABASE_URL is not configured")

        filters = build_filters(start_date, brands)
        rows: List[Dict[str, Any]] = []

        for page in range(MAX_PAGES):
            params = {
                **filters,
                "limit": str(self.page_size),
                "offset": str(page * self.page_size),
            }
            data = await self._request(params)
            rows.extend(data)
            if len(data) < self.page_size:
                break
        else:
            logger.warning(f"Stopped after {MAX_PAGES} pages; result may be truncated")

        logger.info(f"Fetched {len(rows)} rows from {self.table}")
        return [PostRecord.from_row(row) for row in rows]
