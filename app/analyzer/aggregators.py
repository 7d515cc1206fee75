"""Reelpulse — Grouping Aggregators.

Single-pass folds of the filtered record set into per-day, per-account
and per-brand buckets. Buckets are emitted in first-seen key order so
downstream stable sorts break ties by source order.
"""

from typing import Dict, Iterable, List, Optional

from app.analyzer.metrics import interactions
from app.config import settings
from app.models.dashboard_models import (
    AccountAggregate,
    BestPerformingAccount,
    BrandAggregate,
    DailyMetrics,
)
from app.models.post_models import PostRecord
from app.core.logging import get_logger

logger = get_logger("analyzer.aggregators")

UNKNOWN_BRAND = "Unknown"


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def aggregate_daily(records: Iterable[PostRecord]) -> List[DailyMetrics]:
    """Sum counters per date_posted; sorted by date ascending."""
    by_date: Dict[str, DailyMetrics] = {}

    for r in records:
        day = by_date.get(r.date_posted)
        if day is None:
            day = by_date[r.date_posted] = DailyMetrics(date=r.date_posted)
        day.plays += r.plays
        day.likes += r.likes
        day.comments += r.comments
        day.shares += r.shares
        day.saves += r.saves
        day.interactions += interactions(r)

    for day in by_date.values():
        day.engagement_rate = _ratio(day.interactions, day.plays)

    daily = sorted(by_date.values(), key=lambda d: d.date)
    logger.info(f"Computed daily metrics for {len(daily)} days")
    return daily


def aggregate_by_account(records: Iterable[PostRecord]) -> List[AccountAggregate]:
    """Totals per username; records without a username are skipped."""
    accounts: Dict[str, AccountAggregate] = {}

    for r in records:
        if not r.username:
            continue
        acc = accounts.get(r.username)
        if acc is None:
            acc = accounts[r.username] = AccountAggregate(
                username=r.username, followers=r.followers
            )
        if r.brand and r.brand not in acc.brands:
            acc.brands.append(r.brand)
        # Follower counts drift between scrapes; keep the highest seen
        if r.followers > acc.followers:
            acc.followers = r.followers
        acc.total_videos += 1
        acc.total_views += r.plays
        acc.total_likes += r.likes
        acc.total_comments += r.comments
        acc.total_shares += r.shares
        acc.total_saves += r.saves
        acc.total_interactions += interactions(r)

    for acc in accounts.values():
        acc.avg_engagement_rate = _ratio(acc.total_interactions, acc.total_views)

    logger.info(f"Aggregated {len(accounts)} accounts")
    return list(accounts.values())


def aggregate_by_brand(records: Iterable[PostRecord]) -> List[BrandAggregate]:
    """Totals per brand; an empty brand is bucketed as "Unknown"."""
    brands: Dict[str, BrandAggregate] = {}
    usernames: Dict[str, set[str]] = {}

    for r in records:
        name = r.brand or UNKNOWN_BRAND
        agg = brands.get(name)
        if agg is None:
            agg = brands[name] = BrandAggregate(brand=name)
            usernames[name] = set()
        agg.total_videos += 1
        agg.total_views += r.plays
        agg.total_likes += r.likes
        agg.total_comments += r.comments
        agg.total_shares += r.shares
        agg.total_saves += r.saves
        agg.total_interactions += interactions(r)
        if r.username:
            usernames[name].add(r.username)

    for name, agg in brands.items():
        agg.active_accounts = len(usernames[name])
        agg.avg_engagement_rate = _ratio(agg.total_interactions, agg.total_views)
        agg.avg_views = _ratio(agg.total_views, agg.total_videos)

    logger.info(f"Aggregated {len(brands)} brands")
    return list(brands.values())


def complete_brand_listing(
    aggregates: List[BrandAggregate], brands_in_range: Iterable[str]
) -> List[BrandAggregate]:
    """Append zero-valued rows for listed brands with no records."""
    completed = list(aggregates)
    existing = {a.brand for a in aggregates}
    for brand in brands_in_range:
        if brand not in existing:
            completed.append(BrandAggregate(brand=brand))
            existing.add(brand)
    return completed


def best_performing_accounts(
    records: Iterable[PostRecord], min_total_views: Optional[int] = None
) -> List[BestPerformingAccount]:
    """Accounts ranked by average views per video.

    Accounts under `min_total_views` total plays are dropped so that a
    single lucky video does not top the table.
    """
    if min_total_views is None:
        min_total_views = settings.best_accounts_min_views

    buckets: Dict[str, dict] = {}
    for r in records:
        if not r.username:
            continue
        bucket = buckets.get(r.username)
        if bucket is None:
            bucket = buckets[r.username] = {
                "brands": [],
                "followers": r.followers,
                "post_dates": set(),
                "views": [],
            }
        if r.brand and r.brand not in bucket["brands"]:
            bucket["brands"].append(r.brand)
        bucket["post_dates"].add(r.date_posted)
        bucket["views"].append(r.plays)
        if r.followers > bucket["followers"]:
            bucket["followers"] = r.followers

    results: List[BestPerformingAccount] = []
    for username, bucket in buckets.items():
        views = bucket["views"]
        total_views = sum(views)
        if total_views < min_total_views:
            continue
        results.append(
            BestPerformingAccount(
                username=username,
                brands=bucket["brands"],
                followers=bucket["followers"],
                total_videos=len(views),
                total_views=total_views,
                avg_views=total_views / len(views),
                min_views=min(views),
                max_views=max(views),
                days_with_posts=len(bucket["post_dates"]),
            )
        )

    results.sort(key=lambda a: a.avg_views, reverse=True)
    logger.info(
        f"Ranked {len(results)} of {len(buckets)} accounts (min views {min_total_views})"
    )
    return results
