"""Reelpulse — Store selection."""

from typing import AsyncIterator

from app.config import settings
from app.store.base_store import PostStore
from app.store.sql_store import SQLStore
from app.store.supabase_client import SupabaseStore


def build_store(backend: str | None = None) -> PostStore:
    """Return the configured store backend."""
    backend = (backend or settings.store_backend).lower()
    if backend == "sql":
        return SQLStore()
    if backend == "supabase":
        return SupabaseStore()
    raise ValueError(f"Unknown store backend: {backend}")


async def get_store() -> AsyncIterator[PostStore]:
    """Dependency — yields a request-scoped store."""
    store = build_store()
    try:
        yield store
    finally:
        await store.close()
