"""Reelpulse — Dashboard Output Models.

Dashboard-level objects serialize in camelCase (the shape the front end
consumes); per-row tables keep the store's snake_case.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─────────────────────────────────────────────
# QUERY CONFIGURATION — Built once per request
# ─────────────────────────────────────────────


class TimeWindow(str, Enum):
    """Named date windows."""

    DAILY = "daily"
    LAST7 = "last7"
    LAST30 = "last30"
    CUSTOM = "custom"
    ALLTIME = "alltime"


class MatchMode(str, Enum):
    EXACT = "exact"
    CONTAINS = "contains"


class CombineMode(str, Enum):
    OR = "OR"
    AND = "AND"


class DashboardQuery(BaseModel):
    """Every filter a dashboard request can carry."""

    time_window: str = TimeWindow.LAST30.value
    """One of daily|last7|last30|custom|alltime. Unknown values mean no lower bound."""
    start_date: Optional[str] = None
    """Custom window start, YYYY-MM-DD."""
    end_date: Optional[str] = None
    """Custom window end, YYYY-MM-DD."""
    brands: List[str] = []
    hide_unknown: bool = False
    description_ids: List[str] = []
    match_mode: MatchMode = MatchMode.EXACT
    combine_mode: CombineMode = CombineMode.OR


@dataclass(frozen=True)
class WindowBounds:
    """Inclusive calendar-day bounds on date_posted; None means unbounded."""

    start: Optional[date] = None
    end: Optional[date] = None


# ─────────────────────────────────────────────
# PER-RECORD / PER-KEY AGGREGATES
# ─────────────────────────────────────────────


class DerivedMetrics(BaseModel):
    interactions: int = 0
    engagement_rate: float = 0.0


class PostOut(BaseModel):
    """A post row as returned to clients."""

    id: Optional[int] = None
    brand: str = ""
    username: str = ""
    followers: int = 0
    video_id: str = ""
    video_key: str = ""
    description: str = ""
    url: str = ""
    plays: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    saves: int = 0
    date_posted: str = ""
    date_scraped: str = ""
    inserted_at: str = ""


class ProcessedPost(PostOut):
    """A post with its derived metrics attached."""

    interactions: int = 0
    engagement_rate: float = 0.0


class DailyMetrics(CamelModel):
    """Summed counters for one calendar day."""

    date: str
    plays: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    saves: int = 0
    interactions: int = 0
    engagement_rate: float = 0.0


class AccountAggregate(BaseModel):
    """Per-username totals."""

    username: str
    brands: List[str] = []
    followers: int = 0
    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    total_saves: int = 0
    total_interactions: int = 0
    avg_engagement_rate: float = 0.0


class BrandAggregate(BaseModel):
    """Per-brand totals."""

    brand: str
    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    total_saves: int = 0
    total_interactions: int = 0
    active_accounts: int = 0
    avg_engagement_rate: float = 0.0
    avg_views: float = 0.0


class BestPerformingAccount(BaseModel):
    """Account ranked by views per video."""

    username: str
    brands: List[str] = []
    followers: int = 0
    total_videos: int = 0
    total_views: int = 0
    avg_views: float = 0.0
    min_views: int = 0
    max_views: int = 0
    days_with_posts: int = 0


class DescriptionOption(CamelModel):
    """One distinct (normalized) description."""

    id: str
    text: str
    normalized_text: str
    preview: str = ""
    count: int = 1
    first_posted: str = ""
    last_posted: str = ""


class KPISummary(CamelModel):
    """Headline numbers for the filtered set."""

    published_videos: int = 0
    active_accounts: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    total_bookmarks: int = 0
    total_interactions: int = 0
    engagement_rate: float = 0.0
    videos_with_zero_views: int = 0
    videos_with_zero_views_percent: float = 0.0
    avg_views: float = 0.0


# ─────────────────────────────────────────────
# RESPONSES
# ─────────────────────────────────────────────


class DashboardResponse(CamelModel):
    """Payload of GET /api/dashboard."""

    kpis: KPISummary = KPISummary()
    daily_metrics: List[DailyMetrics] = []
    deduped_data: List[PostOut] = []
    total_days_available: int = 0
    brands: List[str] = []
    description_options: List[DescriptionOption] = []


class SearchResponse(CamelModel):
    """Paginated search results."""

    mode: str
    query: str
    page: int = 1
    per_page: int = 10
    total_results: int = 0
    total_pages: int = 0
    videos: List[ProcessedPost] = Field(default_factory=list)
    accounts: List[AccountAggregate] = Field(default_factory=list)
