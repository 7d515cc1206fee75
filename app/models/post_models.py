"""Reelpulse — Post Performance Record (canonical store row).

One published video with its engagement counters. Every store adapter
builds records through `PostRecord.from_row`, so counters are always
non-negative ints and text fields are always strings by the time the
analyzer engines see them.
"""

from typing import Any, Dict, Optional
from sqlmodel import SQLModel, Field

from app.config import settings

COUNTER_FIELDS = ("plays", "likes", "comments", "shares", "saves", "followers")
TEXT_FIELDS = (
    "brand",
    "username",
    "video_id",
    "video_key",
    "description",
    "url",
    "date_posted",
    "date_scraped",
    "inserted_at",
)


def _safe_int(value: Any) -> int:
    """Safely convert a counter to a non-negative int."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class PostRecord(SQLModel, table=True):
    """Post performance row, as exposed by the deduplicated store view."""

    __tablename__ = settings.store_table

    id: Optional[int] = Field(default=None, primary_key=True)
    brand: str = Field(default="", index=True)
    username: str = Field(default="", index=True)
    followers: int = Field(default=0, description="Account followers at scrape")
    video_id: str = Field(default="")
    video_key: str = Field(default="")
    description: str = Field(default="")
    url: str = Field(default="")
    plays: int = Field(default=0)
    likes: int = Field(default=0)
    comments: int = Field(default=0)
    shares: int = Field(default=0)
    saves: int = Field(default=0)
    date_posted: str = Field(default="", index=True, description="YYYY-MM-DD")
    date_scraped: str = Field(default="", description="YYYY-MM-DD")
    inserted_at: str = Field(default="", description="ISO timestamp")

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PostRecord":
        """Build a record from a raw store row, defaulting missing values."""
        values: Dict[str, Any] = {}
        raw_id = row.get("id")
        values["id"] = _safe_int(raw_id) if raw_id is not None else None
        for name in COUNTER_FIELDS:
            values[name] = _safe_int(row.get(name))
        for name in TEXT_FIELDS:
            values[name] = _safe_str(row.get(name))
        # Timestamps may carry a time part; keep only the calendar day
        values["date_posted"] = values["date_posted"][:10]
        return cls(**values)
