"""Reelpulse — Per-Post Metric Deriver."""

from typing import Iterable, List

from app.core.metric_registry import INTERACTION_COUNTERS
from app.models.dashboard_models import DerivedMetrics, ProcessedPost
from app.models.post_models import PostRecord


def interactions(record: PostRecord) -> int:
    """Likes + comments + shares + saves."""
    return sum(getattr(record, name) or 0 for name in INTERACTION_COUNTERS)


def engagement_rate(record: PostRecord) -> float:
    """Interactions per play; 0 when the post has no plays."""
    plays = record.plays or 0
    return interactions(record) / plays if plays > 0 else 0.0


def derive_metrics(record: PostRecord) -> DerivedMetrics:
    return DerivedMetrics(
        interactions=interactions(record),
        engagement_rate=engagement_rate(record),
    )


def process_posts(records: Iterable[PostRecord]) -> List[ProcessedPost]:
    """Attach derived metrics to each record (input is left untouched)."""
    processed: List[ProcessedPost] = []
    for record in records:
        derived = derive_metrics(record)
        processed.append(
            ProcessedPost(
                **record.model_dump(),
                interactions=derived.interactions,
                engagement_rate=derived.engagement_rate,
            )
        )
    return processed
