"""Reelpulse — Selectors & Rankers.

Filters applied before aggregation and the top-N ranking shared by every
table endpoint. None of these mutate their input.
"""

import math
import re
import unicodedata
from datetime import date
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar, Union

from app.analyzer.aggregators import UNKNOWN_BRAND, aggregate_by_account
from app.analyzer.metrics import process_posts
from app.analyzer.normalizer import normalize_description
from app.config import settings
from app.core.metric_registry import SortField
from app.models.dashboard_models import (
    AccountAggregate,
    CombineMode,
    DescriptionOption,
    MatchMode,
    ProcessedPost,
)
from app.models.post_models import PostRecord

T = TypeVar("T")

SortKey = Union[SortField, str, Callable[[Any], float]]


# ─────────────────────────────────────────────
# RANKING
# ─────────────────────────────────────────────


def _extractor(field: SortKey) -> Callable[[Any], float]:
    if callable(field) and not isinstance(field, str):
        return field
    return SortField(field).extractor


def top_n(items: Sequence[T], field: SortKey, n: int) -> List[T]:
    """Highest `n` items by `field`, descending.

    Ties keep their source order. Missing values rank as 0.
    """
    extract = _extractor(field)
    ranked = sorted(items, key=lambda item: extract(item) or 0, reverse=True)
    return ranked[: max(n, 0)]


# ─────────────────────────────────────────────
# RECORD FILTERS
# ─────────────────────────────────────────────


def filter_by_brands(
    records: Sequence[PostRecord], brands: Iterable[str]
) -> List[PostRecord]:
    """Keep records of the selected brands; no selection keeps everything."""
    selected = set(brands)
    if not selected:
        return list(records)
    return [r for r in records if r.brand in selected]


def filter_hide_unknown(records: Sequence[PostRecord]) -> List[PostRecord]:
    return [r for r in records if r.brand and r.brand != UNKNOWN_BRAND]


def filter_by_date_range(
    records: Sequence[PostRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PostRecord]:
    """Inclusive bounds on date_posted (ISO strings compare as dates)."""
    start_str = start.isoformat() if start else None
    end_str = end.isoformat() if end else None
    return [
        r
        for r in records
        if (start_str is None or r.date_posted >= start_str)
        and (end_str is None or r.date_posted <= end_str)
    ]


def filter_by_descriptions(
    records: Sequence[PostRecord],
    selected_ids: Sequence[str],
    options: Sequence[DescriptionOption],
    match_mode: MatchMode = MatchMode.EXACT,
    combine_mode: CombineMode = CombineMode.OR,
) -> List[PostRecord]:
    """Keep records whose description matches the selected options.

    With EXACT + AND, two different selected texts can never both equal
    one description, so that combination returns nothing.
    """
    if not selected_ids:
        return list(records)

    wanted = set(selected_ids)
    texts = [o.normalized_text for o in options if o.id in wanted]
    match_mode = MatchMode(match_mode)
    combine = all if CombineMode(combine_mode) == CombineMode.AND else any

    def matches(record: PostRecord) -> bool:
        desc = normalize_description(record.description)
        if match_mode == MatchMode.EXACT:
            return combine(desc == text for text in texts)
        return combine(text in desc for text in texts)

    return [r for r in records if matches(r)]


# ─────────────────────────────────────────────
# BRAND LISTING
# ─────────────────────────────────────────────


def exclude_blocked_brands(
    brands: Iterable[str], blocked: Optional[Iterable[str]] = None
) -> List[str]:
    """Drop placeholder labels ("0", "Unknown", blanks...) from a listing."""
    deny = set(blocked) if blocked is not None else settings.blocked_brand_set
    return [b for b in brands if b and b.strip() and b.strip() not in deny]


def list_brands(records: Iterable[PostRecord]) -> List[str]:
    """Distinct brands in first-seen order, junk labels removed."""
    seen: dict[str, None] = {}
    for r in records:
        if r.brand:
            seen.setdefault(r.brand, None)
    return exclude_blocked_brands(seen)


def brand_to_slug(brand: str) -> str:
    """URL slug: lowercase ASCII, diacritics stripped, words joined by '-'."""
    slug = unicodedata.normalize("NFD", brand.lower())
    slug = "".join(c for c in slug if not unicodedata.combining(c))
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def slug_to_brand(slug: str, brands: Iterable[str]) -> Optional[str]:
    target = slug.lower()
    for brand in brands:
        if brand_to_slug(brand) == target:
            return brand
    return None


# ─────────────────────────────────────────────
# SEARCH
# ─────────────────────────────────────────────


def search_posts(records: Sequence[PostRecord], query: str) -> List[ProcessedPost]:
    """Posts whose description, username or video id contains `query`."""
    if not query.strip():
        return []
    needle = query.lower()
    hits = [
        r
        for r in records
        if needle in r.description.lower()
        or needle in r.username.lower()
        or needle in r.video_id.lower()
    ]
    return top_n(process_posts(hits), SortField.PLAYS, len(hits))


def search_accounts(
    records: Sequence[PostRecord], query: str
) -> List[AccountAggregate]:
    if not query.strip():
        return []
    needle = query.lower()
    hits = [a for a in aggregate_by_account(records) if needle in a.username.lower()]
    return top_n(hits, SortField.TOTAL_VIEWS, len(hits))


def paginate(items: Sequence[T], page: int, per_page: int) -> tuple[List[T], int]:
    """Return (page slice, total pages). Pages are 1-based."""
    per_page = max(per_page, 1)
    page = max(page, 1)
    total_pages = math.ceil(len(items) / per_page)
    start = (page - 1) * per_page
    return list(items[start : start + per_page]), total_pages
