"""Reelpulse — Unified Metric Registry.

Defines the canonical set of post metrics and their classifications,
plus the sortable fields the rankers accept. When a new counter shows up
in the store (e.g. reposts), register it here so the engines and the
table endpoints treat it uniformly.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple


class MetricType(str, Enum):
    """How a metric is categorised."""

    VOLUME = "volume"  # Raw counts: plays
    ENGAGEMENT = "engagement"  # Likes, comments, shares, saves
    AUDIENCE = "audience"  # Account-level: followers
    DERIVED = "derived"  # Computed by engines: interactions, engagement_rate


class MetricDefinition:
    """Describes a single metric."""

    def __init__(
        self, name: str, metric_type: MetricType, unit: str = "", description: str = ""
    ):
        self.name = name
        self.metric_type = metric_type
        self.unit = unit
        self.description = description

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.metric_type.value})>"


# ─────────────────────────────────────────────
# POST METRICS — Raw counters from the store
# ─────────────────────────────────────────────

POST_METRICS: Dict[str, MetricDefinition] = {
    "plays": MetricDefinition("plays", MetricType.VOLUME, "count", "Video plays"),
    "likes": MetricDefinition("likes", MetricType.ENGAGEMENT, "count", "Likes"),
    "comments": MetricDefinition(
        "comments", MetricType.ENGAGEMENT, "count", "Comments"
    ),
    "shares": MetricDefinition("shares", MetricType.ENGAGEMENT, "count", "Shares"),
    "saves": MetricDefinition(
        "saves", MetricType.ENGAGEMENT, "count", "Bookmarks / saves"
    ),
    "followers": MetricDefinition(
        "followers", MetricType.AUDIENCE, "count", "Account followers at scrape time"
    ),
}

# Counters summed into `interactions`
INTERACTION_COUNTERS = ("likes", "comments", "shares", "saves")


# ─────────────────────────────────────────────
# DERIVED METRICS — Computed by analyzer engines
# ─────────────────────────────────────────────

DERIVED_METRICS: Dict[str, MetricDefinition] = {
    "interactions": MetricDefinition(
        "interactions",
        MetricType.DERIVED,
        "count",
        "Likes + comments + shares + saves",
    ),
    "engagement_rate": MetricDefinition(
        "engagement_rate", MetricType.DERIVED, "ratio", "Interactions / plays"
    ),
    "avg_views": MetricDefinition(
        "avg_views", MetricType.DERIVED, "count", "Plays per published video"
    ),
}


# ─────────────────────────────────────────────
# SORTABLE FIELDS — Used by every ranked table
# ─────────────────────────────────────────────


class SortField(str, Enum):
    """Fields a ranked table can be ordered by."""

    PLAYS = "plays"
    LIKES = "likes"
    COMMENTS = "comments"
    SHARES = "shares"
    SAVES = "saves"
    FOLLOWERS = "followers"
    INTERACTIONS = "interactions"
    ENGAGEMENT_RATE = "engagement_rate"
    TOTAL_VIDEOS = "total_videos"
    TOTAL_VIEWS = "total_views"
    TOTAL_LIKES = "total_likes"
    TOTAL_COMMENTS = "total_comments"
    TOTAL_SHARES = "total_shares"
    TOTAL_SAVES = "total_saves"
    TOTAL_INTERACTIONS = "total_interactions"
    AVG_VIEWS = "avg_views"
    AVG_ENGAGEMENT_RATE = "avg_engagement_rate"
    ACTIVE_ACCOUNTS = "active_accounts"

    @property
    def extractor(self) -> Callable[[Any], float]:
        return SORT_EXTRACTORS[self]


def _attr(name: str) -> Callable[[Any], float]:
    """Extractor reading `name` off a model or dict; missing → 0."""

    def extract(item: Any) -> float:
        if isinstance(item, dict):
            value = item.get(name)
        else:
            value = getattr(item, name, None)
        return value or 0

    extract.__name__ = f"extract_{name}"
    return extract


SORT_EXTRACTORS: Dict[SortField, Callable[[Any], float]] = {
    field: _attr(field.value) for field in SortField
}

_TOTALS = (
    SortField.TOTAL_VIDEOS,
    SortField.TOTAL_VIEWS,
    SortField.TOTAL_LIKES,
    SortField.TOTAL_COMMENTS,
    SortField.TOTAL_SHARES,
    SortField.TOTAL_SAVES,
    SortField.TOTAL_INTERACTIONS,
)

# Fields present on each ranked row type
POST_SORT_FIELDS: Tuple[SortField, ...] = (
    SortField.PLAYS,
    SortField.LIKES,
    SortField.COMMENTS,
    SortField.SHARES,
    SortField.SAVES,
    SortField.FOLLOWERS,
    SortField.INTERACTIONS,
    SortField.ENGAGEMENT_RATE,
)
ACCOUNT_SORT_FIELDS: Tuple[SortField, ...] = (
    SortField.FOLLOWERS,
    *_TOTALS,
    SortField.AVG_ENGAGEMENT_RATE,
)
BRAND_SORT_FIELDS: Tuple[SortField, ...] = (
    *_TOTALS,
    SortField.ACTIVE_ACCOUNTS,
    SortField.AVG_VIEWS,
    SortField.AVG_ENGAGEMENT_RATE,
)


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

ALL_METRICS = {**POST_METRICS, **DERIVED_METRICS}


def describe_metrics() -> list[dict]:
    """Registry as plain dicts, for the API."""
    return [
        {
            "name": m.name,
            "type": m.metric_type.value,
            "unit": m.unit,
            "description": m.description,
        }
        for m in ALL_METRICS.values()
    ]


def parse_sort_field(
    value: str, allowed: Optional[Sequence[SortField]] = None
) -> SortField:
    """Resolve a query-string value into a SortField.

    Raises ValueError for unknown fields, or for fields outside `allowed`.
    """
    choices = tuple(allowed) if allowed is not None else tuple(SortField)
    names = ", ".join(f.value for f in choices)
    try:
        field = SortField(value)
    except ValueError:
        raise ValueError(f"Unknown sort field '{value}'. Allowed: {names}")
    if field not in choices:
        raise ValueError(f"Cannot sort this table by '{value}'. Allowed: {names}")
    return field
