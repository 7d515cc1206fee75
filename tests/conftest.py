from datetime import date
from typing import List, Optional, Sequence

import pytest

from app.models.post_models import PostRecord
from app.store.base_store import PostStore, StoreError


def make_post(**fields) -> PostRecord:
    row = {
        "brand": "Acme",
        "username": "alice",
        "date_posted": "2024-01-01",
        "description": "",
    }
    row.update(fields)
    return PostRecord.from_row(row)


class FakeStore(PostStore):
    """In-memory store honouring the date / brand predicates."""

    def __init__(self, records: Sequence[PostRecord] = (), error: Optional[str] = None):
        self.records = list(records)
        self.error = error
        self.calls: list[tuple[Optional[date], list[str]]] = []

    async def fetch_posts(self, start_date=None, brands=None) -> List[PostRecord]:
        self.calls.append((start_date, list(brands or [])))
        if self.error:
            raise StoreError(self.error, 500)
        rows = self.records
        if start_date is not None:
            rows = [r for r in rows if r.date_posted >= start_date.isoformat()]
        if brands:
            rows = [r for r in rows if r.brand in brands]
        return rows


@pytest.fixture
def post():
    return make_post
