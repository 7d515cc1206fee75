"""Reelpulse — Time Window Resolution.

Turns a window keyword into the lower bound the store query filters
`date_posted` on (inclusive).
"""

from datetime import date, datetime, timedelta
from typing import Optional

from app.models.dashboard_models import DashboardQuery, TimeWindow, WindowBounds


def _validate_date(d: Optional[str]) -> Optional[date]:
    """Return the parsed date if valid YYYY-MM-DD, else None."""
    if not d:
        return None
    try:
        return datetime.strptime(d, "%Y-%m-%d").date()
    except ValueError:
        return None


def resolve_window_start(window: str, now: datetime) -> Optional[datetime]:
    """Lower bound for a named window; None means no lower bound.

    last7/last30 subtract whole days from `now` and keep its time of day,
    so once reduced to a calendar date the span covers 8 (resp. 31) days.
    """
    if window == TimeWindow.DAILY.value:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == TimeWindow.LAST7.value:
        return now - timedelta(days=7)
    if window == TimeWindow.LAST30.value:
        return now - timedelta(days=30)
    # alltime, custom (explicit dates) and unknown keywords
    return None


def resolve_window(
    query: DashboardQuery, now: Optional[datetime] = None
) -> WindowBounds:
    """Calendar-day bounds for a dashboard query."""
    now = now or datetime.now()

    if query.time_window == TimeWindow.CUSTOM.value:
        return WindowBounds(
            start=_validate_date(query.start_date),
            end=_validate_date(query.end_date),
        )

    start = resolve_window_start(query.time_window, now)
    return WindowBounds(start=start.date() if start else None)
