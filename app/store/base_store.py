"""Reelpulse — Abstract Record Store."""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence

from app.models.post_models import PostRecord


class StoreError(Exception):
    """Raised when the record store cannot be read."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class PostStore(ABC):
    """Read-only source of post performance rows.

    Implementations return fully-defaulted PostRecords (see
    `PostRecord.from_row`) and raise StoreError on any read failure.
    """

    @abstractmethod
    async def fetch_posts(
        self,
        start_date: Optional[date] = None,
        brands: Optional[Sequence[str]] = None,
    ) -> List[PostRecord]:
        """Fetch every row matching the predicates.

        Args:
            start_date: Keep rows with date_posted on or after this day.
                        None means no lower bound.
            brands: Keep rows whose brand is in this list.
                    None or empty means no restriction.
        """
        ...

    async def close(self) -> None:
        """Release any open connections."""
        return None
