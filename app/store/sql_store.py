"""Reelpulse — SQL Record Store.

Serves the same read contract as the Supabase store from a local
database (SQLite by default, PostgreSQL via DATABASE_URL). Useful for
development and offline analysis of exported rows.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.post_models import PostRecord
from app.store.base_store import PostStore, StoreError
from app.core.logging import get_logger

logger = get_logger("store.sql")


class SQLStore(PostStore):
    """PostStore backed by a SQLModel engine."""

    def __init__(self, engine: Engine | None = None):
        if engine is None:
            from app.database import engine as default_engine

            engine = default_engine
        self.engine = engine

    async def fetch_posts(
        self,
        start_date: Optional[date] = None,
        brands: Optional[Sequence[str]] = None,
    ) -> List[PostRecord]:
        query = select(PostRecord)
        if start_date is not None:
            query = query.where(PostRecord.date_posted >= start_date.isoformat())
        if brands:
            query = query.where(PostRecord.brand.in_(list(brands)))  # type: ignore
        query = query.order_by(PostRecord.id)  # type: ignore

        try:
            with Session(self.engine) as session:
                rows = session.exec(query).all()
                records = [PostRecord.from_row(r.model_dump()) for r in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"Database read failed: {e}") from e

        logger.info(f"Fetched {len(records)} rows from {PostRecord.__tablename__}")
        return records

    def add_posts(self, rows: Iterable[Dict[str, Any] | PostRecord]) -> int:
        """Insert rows (raw dicts are defaulted via PostRecord.from_row)."""
        records = [
            r if isinstance(r, PostRecord) else PostRecord.from_row(r) for r in rows
        ]
        with Session(self.engine) as session:
            session.add_all(records)
            session.commit()
        logger.info(f"Inserted {len(records)} rows")
        return len(records)
