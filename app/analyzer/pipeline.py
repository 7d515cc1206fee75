"""Reelpulse — Dashboard Pipeline Orchestrator.

Runs the full data flow for one request:
  resolve window → one store read → scope filters → description filter
  → engines → DashboardResponse / ranked tables

The store read is the only await point; everything after it is a pure
transformation of that snapshot.
"""

import time
from datetime import datetime
from typing import List, Optional, Sequence

from app.analyzer.aggregators import (
    aggregate_by_account,
    aggregate_by_brand,
    aggregate_daily,
    best_performing_accounts,
    complete_brand_listing,
)
from app.analyzer.kpi_engine import compute_kpis
from app.analyzer.metrics import process_posts
from app.analyzer.normalizer import extract_description_options
from app.analyzer.selectors import (
    filter_by_brands,
    filter_by_date_range,
    filter_by_descriptions,
    filter_hide_unknown,
    list_brands,
    paginate,
    search_accounts,
    search_posts,
    top_n,
)
from app.analyzer.time_window import resolve_window
from app.core.metric_registry import SortField
from app.models.dashboard_models import (
    AccountAggregate,
    BestPerformingAccount,
    BrandAggregate,
    DashboardQuery,
    DashboardResponse,
    DescriptionOption,
    PostOut,
    ProcessedPost,
    SearchResponse,
)
from app.models.post_models import PostRecord
from app.store.base_store import PostStore
from app.core.logging import get_logger

logger = get_logger("analyzer.pipeline")


# ─────────────────────────────────────────────
# SNAPSHOT
# ─────────────────────────────────────────────


async def fetch_scoped_records(
    store: PostStore,
    query: DashboardQuery,
    now: Optional[datetime] = None,
) -> List[PostRecord]:
    """One store read, narrowed to the query's window, brands and visibility."""
    bounds = resolve_window(query, now)
    started = time.perf_counter()

    records = await store.fetch_posts(start_date=bounds.start, brands=query.brands)

    logger.info(
        f"Store returned {len(records)} records (start={bounds.start}, end={bounds.end})",
        extra={
            "time_window": query.time_window,
            "record_count": len(records),
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )

    records = filter_by_date_range(records, end=bounds.end)
    records = filter_by_brands(records, query.brands)
    if query.hide_unknown:
        records = filter_hide_unknown(records)
    return records


def apply_description_filter(
    records: Sequence[PostRecord], query: DashboardQuery
) -> tuple[List[PostRecord], List[DescriptionOption]]:
    """Options are drawn from the scoped set, before descriptions narrow it."""
    options = extract_description_options(records)
    filtered = filter_by_descriptions(
        records,
        query.description_ids,
        options,
        query.match_mode,
        query.combine_mode,
    )
    return filtered, options


# ─────────────────────────────────────────────
# DASHBOARD
# ─────────────────────────────────────────────


def build_dashboard(
    records: Sequence[PostRecord], query: Optional[DashboardQuery] = None
) -> DashboardResponse:
    """Assemble the dashboard payload from a scoped record set."""
    query = query or DashboardQuery()
    if query.hide_unknown:
        records = filter_hide_unknown(records)
    filtered, options = apply_description_filter(records, query)

    kpis = compute_kpis(filtered)
    daily = aggregate_daily(filtered)

    return DashboardResponse(
        kpis=kpis,
        daily_metrics=daily,
        deduped_data=[PostOut(**r.model_dump()) for r in filtered],
        total_days_available=len(daily),
        brands=list_brands(records),
        description_options=options,
    )


async def run_dashboard(
    store: PostStore,
    query: DashboardQuery,
    now: Optional[datetime] = None,
) -> DashboardResponse:
    """Execute the dashboard pipeline for one request."""
    logger.info(f"Starting dashboard pipeline: window={query.time_window}")
    records = await fetch_scoped_records(store, query, now)
    response = build_dashboard(records, query)
    logger.info(
        f"Dashboard complete: {response.kpis.published_videos} videos, "
        f"{response.total_days_available} days"
    )
    return response


async def load_filtered_records(
    store: PostStore,
    query: DashboardQuery,
    now: Optional[datetime] = None,
) -> tuple[List[PostRecord], List[PostRecord]]:
    """Return (scoped, description-filtered) records for the table views."""
    scoped = await fetch_scoped_records(store, query, now)
    filtered, _ = apply_description_filter(scoped, query)
    return scoped, filtered


# ─────────────────────────────────────────────
# RANKED TABLES
# ─────────────────────────────────────────────


def top_videos(
    records: Sequence[PostRecord], sort_by: SortField = SortField.PLAYS, limit: int = 5
) -> List[ProcessedPost]:
    return top_n(process_posts(records), sort_by, limit)


def top_accounts(
    records: Sequence[PostRecord],
    sort_by: SortField = SortField.TOTAL_VIEWS,
    limit: int = 5,
) -> List[AccountAggregate]:
    return top_n(aggregate_by_account(records), sort_by, limit)


def brand_overview(
    records: Sequence[PostRecord],
    brands_in_range: Sequence[str] = (),
    sort_by: SortField = SortField.TOTAL_VIEWS,
) -> List[BrandAggregate]:
    """Every brand in range, including those with no matching posts."""
    aggregates = complete_brand_listing(aggregate_by_brand(records), brands_in_range)
    return top_n(aggregates, sort_by, len(aggregates))


def best_accounts(
    records: Sequence[PostRecord], limit: Optional[int] = None
) -> List[BestPerformingAccount]:
    ranked = best_performing_accounts(records)
    return ranked if limit is None else ranked[:limit]


def search(
    records: Sequence[PostRecord],
    q: str,
    mode: str = "videos",
    page: int = 1,
    per_page: int = 10,
) -> SearchResponse:
    """Paginated text search over posts or accounts."""
    if mode == "accounts":
        hits_accounts = search_accounts(records, q)
        page_items, total_pages = paginate(hits_accounts, page, per_page)
        return SearchResponse(
            mode=mode,
            query=q,
            page=page,
            per_page=per_page,
            total_results=len(hits_accounts),
            total_pages=total_pages,
            accounts=page_items,
        )

    hits_videos = search_posts(records, q)
    page_items_v, total_pages = paginate(hits_videos, page, per_page)
    return SearchResponse(
        mode="videos",
        query=q,
        page=page,
        per_page=per_page,
        total_results=len(hits_videos),
        total_pages=total_pages,
        videos=page_items_v,
    )
