"""
Consecutive-negative trend detection.

For every category that is Negative in the current observation, count how
many of the most recent history entries were also Negative for it, without
a gap. The current observation is cycle 1; a missing category or any
non-negative reading ends the streak.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from feedbackq.analysis.models import Category, Sentiment
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter
from feedbackq.trends.models import CategorySentiment, HistoricalEntry, TrendEntry

logger = get_logger(__name__)


def negative_streak(category: Category, history: Sequence[HistoricalEntry]) -> int:
    """Streak length for ``category`` assuming the current reading is Negative."""
    streak = 1
    for entry in reversed(history):
        previous = entry.find(category)
        if previous is None or previous.sentiment != Sentiment.NEGATIVE:
            break
        streak += 1
    return streak


def detect_trends(
    current_categories: Iterable[CategorySentiment],
    history: Sequence[HistoricalEntry],
) -> list[TrendEntry]:
    """
    Compute trend entries for the currently negative categories.

    Args:
        current_categories: The observation being evaluated
        history: Past entries, oldest first (the current observation excluded)

    Returns:
        TrendEntry list ordered by priority then streak, both descending;
        exact ties keep input order.
    """
    trends = [
        TrendEntry(
            category=current.category,
            consecutive_negative_cycles=negative_streak(current.category, history),
            current_sentiment_score=current.score,
        )
        for current in current_categories
        if current.sentiment == Sentiment.NEGATIVE
    ]

    trends.sort(key=lambda t: (t.priority.rank, t.consecutive_negative_cycles), reverse=True)

    if trends:
        counter("trends.detected", len(trends))
        logger.info(
            "Detected %d negative trend(s): %s",
            len(trends),
            ", ".join(f"{t.category.value}x{t.consecutive_negative_cycles}" for t in trends),
        )
    return trends
