"""Reelpulse — Dashboard API Routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.analyzer.pipeline import (
    best_accounts,
    brand_overview,
    build_dashboard,
    fetch_scoped_records,
    load_filtered_records,
    run_dashboard,
    search,
    top_accounts,
    top_videos,
)
from app.analyzer.selectors import filter_by_brands, list_brands, slug_to_brand
from app.config import settings
from app.core.metric_registry import (
    ACCOUNT_SORT_FIELDS,
    BRAND_SORT_FIELDS,
    POST_SORT_FIELDS,
    SortField,
    describe_metrics,
    parse_sort_field,
)
from app.models.dashboard_models import (
    AccountAggregate,
    BestPerformingAccount,
    BrandAggregate,
    CombineMode,
    DashboardQuery,
    DashboardResponse,
    MatchMode,
    ProcessedPost,
    SearchResponse,
)
from app.store.base_store import PostStore, StoreError
from app.store.factory import get_store
from app.core.logging import get_logger

logger = get_logger("api.dashboard")

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


# ── Request parsing ──


def _split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part for part in raw.split(",") if part]


def dashboard_query(
    time_window: str = Query(
        settings.default_time_window,
        alias="timeWindow",
        description="daily | last7 | last30 | custom | alltime",
    ),
    brands: Optional[str] = Query(None, description="Comma-separated brand labels"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    hide_unknown: bool = Query(False, alias="hideUnknown"),
    descriptions: Optional[str] = Query(
        None, description="Comma-separated description option ids"
    ),
    match_mode: MatchMode = Query(MatchMode.EXACT, alias="matchMode"),
    combine_mode: CombineMode = Query(CombineMode.OR, alias="combineMode"),
) -> DashboardQuery:
    """Dependency — builds the per-request filter configuration."""
    return DashboardQuery(
        time_window=time_window,
        start_date=start_date,
        end_date=end_date,
        brands=_split_csv(brands),
        hide_unknown=hide_unknown,
        description_ids=_split_csv(descriptions),
        match_mode=match_mode,
        combine_mode=combine_mode,
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _failure(endpoint: str, e: Exception) -> JSONResponse:
    if isinstance(e, StoreError):
        logger.error(
            f"Store error: {e}",
            extra={"endpoint": endpoint, "status_code": e.status_code},
        )
    else:
        logger.exception(f"Dashboard request failed: {e}", extra={"endpoint": endpoint})
    return _error(500, str(e))


# ── Endpoints ──


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """KPIs, daily metrics, filtered rows, brand and description listings."""
    try:
        return await run_dashboard(store, query)
    except Exception as e:
        return _failure("/api/dashboard", e)


@router.get("/top-videos", response_model=List[ProcessedPost])
async def get_top_videos(
    sort_by: str = Query("plays", alias="sortBy"),
    limit: int = Query(settings.default_top_n, ge=1, le=500),
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """Top videos by a post metric."""
    try:
        field = parse_sort_field(sort_by, POST_SORT_FIELDS)
    except ValueError as e:
        return _error(400, str(e))
    try:
        _, records = await load_filtered_records(store, query)
        return top_videos(records, field, limit)
    except Exception as e:
        return _failure("/api/dashboard/top-videos", e)


@router.get("/top-accounts", response_model=List[AccountAggregate])
async def get_top_accounts(
    sort_by: str = Query("total_views", alias="sortBy"),
    limit: int = Query(settings.default_top_n, ge=1, le=500),
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """Top accounts by an aggregate metric."""
    try:
        field = parse_sort_field(sort_by, ACCOUNT_SORT_FIELDS)
    except ValueError as e:
        return _error(400, str(e))
    try:
        _, records = await load_filtered_records(store, query)
        return top_accounts(records, field, limit)
    except Exception as e:
        return _failure("/api/dashboard/top-accounts", e)


@router.get("/brands", response_model=List[BrandAggregate])
async def get_brand_overview(
    sort_by: str = Query("total_views", alias="sortBy"),
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """Per-brand totals for every brand in range."""
    try:
        field = parse_sort_field(sort_by, BRAND_SORT_FIELDS)
    except ValueError as e:
        return _error(400, str(e))
    try:
        scoped, records = await load_filtered_records(store, query)
        return brand_overview(records, list_brands(scoped), field)
    except Exception as e:
        return _failure("/api/dashboard/brands", e)


@router.get("/best-accounts", response_model=List[BestPerformingAccount])
async def get_best_accounts(
    limit: Optional[int] = Query(None, ge=1, le=500),
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """Accounts ranked by average views per video."""
    try:
        _, records = await load_filtered_records(store, query)
        return best_accounts(records, limit)
    except Exception as e:
        return _failure("/api/dashboard/best-accounts", e)


@router.get("/search", response_model=SearchResponse)
async def search_dashboard(
    q: str = Query("", description="Search text"),
    mode: str = Query("videos", pattern="^(videos|accounts)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, alias="perPage", ge=1, le=100),
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """Search videos (description / username / video id) or accounts."""
    try:
        _, records = await load_filtered_records(store, query)
        return search(records, q, mode, page, per_page)
    except Exception as e:
        return _failure("/api/dashboard/search", e)


@router.get("/metrics")
async def get_metric_registry():
    """Metric definitions and the fields tables can be sorted by."""
    return {
        "metrics": describe_metrics(),
        "sort_fields": [f.value for f in SortField],
        "table_sort_fields": {
            "top-videos": [f.value for f in POST_SORT_FIELDS],
            "top-accounts": [f.value for f in ACCOUNT_SORT_FIELDS],
            "brands": [f.value for f in BRAND_SORT_FIELDS],
        },
    }


@router.get("/brand/{slug}", response_model=DashboardResponse)
async def get_brand_dashboard(
    slug: str,
    query: DashboardQuery = Depends(dashboard_query),
    store: PostStore = Depends(get_store),
):
    """Dashboard restricted to the brand a URL slug resolves to."""
    try:
        scoped = await fetch_scoped_records(
            store, query.model_copy(update={"brands": []})
        )
        brand = slug_to_brand(slug, list_brands(scoped))
        if brand is None:
            return _error(404, f"No brand matches '{slug}'")
        return build_dashboard(filter_by_brands(scoped, [brand]), query)
    except Exception as e:
        return _failure("/api/dashboard/brand", e)
