"""Reelpulse — KPI Engine.

Folds the filtered record set into the headline KPI summary:
volume totals, engagement rate, zero-view share, average views.
"""

from typing import Sequence

from app.analyzer.metrics import interactions
from app.models.dashboard_models import KPISummary
from app.models.post_models import PostRecord
from app.core.logging import get_logger

logger = get_logger("analyzer.kpi")


def compute_kpis(records: Sequence[PostRecord]) -> KPISummary:
    """Compute the KPI summary for a set of posts."""
    total_views = 0
    total_likes = 0
    total_comments = 0
    total_shares = 0
    total_saves = 0
    total_interactions = 0
    zero_view_videos = 0
    usernames: set[str] = set()

    for r in records:
        total_views += r.plays
        total_likes += r.likes
        total_comments += r.comments
        total_shares += r.shares
        total_saves += r.saves
        total_interactions += interactions(r)
        if r.plays == 0:
            zero_view_videos += 1
        if r.username:
            usernames.add(r.username)

    published = len(records)

    # Engagement Rate
    eng_rate = (total_interactions / total_views) if total_views > 0 else 0.0
    # Zero-view share
    zero_pct = (zero_view_videos / published) if published > 0 else 0.0
    # Average views
    avg_views = (total_views / published) if published > 0 else 0.0

    kpis = KPISummary(
        published_videos=published,
        active_accounts=len(usernames),
        total_views=total_views,
        total_likes=total_likes,
        total_comments=total_comments,
        total_shares=total_shares,
        total_bookmarks=total_saves,
        total_interactions=total_interactions,
        engagement_rate=eng_rate,
        videos_with_zero_views=zero_view_videos,
        videos_with_zero_views_percent=zero_pct,
        avg_views=avg_views,
    )

    logger.info(
        f"Computed KPIs for {published} videos across {len(usernames)} accounts"
    )
    return kpis
