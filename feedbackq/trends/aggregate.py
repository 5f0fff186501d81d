"""
Build HistoricalEntry snapshots from analysis records.

A single record becomes a one-category entry; a batch is folded into one
entry with per-category mention counts, a mean score and the dominant
sentiment.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from feedbackq.analysis.models import AnalysisRecord, Category, Sentiment
from feedbackq.trends.models import CategorySentiment, HistoricalEntry, OverallSentiment

SENTIMENT_SCORES = {
    Sentiment.POSITIVE: 80,
    Sentiment.NEUTRAL: 50,
    Sentiment.NEGATIVE: 20,
}

# Tie-break order when two sentiments are equally frequent for a category
_SEVERITY = {Sentiment.NEGATIVE: 3, Sentiment.NEUTRAL: 2, Sentiment.POSITIVE: 1}

MAX_BATCH_SUMMARY_CHARS = 500


def dominant_sentiment(sentiments: Sequence[Sentiment]) -> Sentiment:
    counts = Counter(sentiments)
    return max(counts, key=lambda s: (counts[s], _SEVERITY[s]))


def overall_sentiment(records: Sequence[AnalysisRecord]) -> OverallSentiment:
    if not records:
        return OverallSentiment()
    counts = Counter(record.sentiment for record in records)
    total = len(records)
    return OverallSentiment(
        positive=round(100 * counts[Sentiment.POSITIVE] / total),
        neutral=round(100 * counts[Sentiment.NEUTRAL] / total),
        negative=round(100 * counts[Sentiment.NEGATIVE] / total),
    )


def category_analysis(records: Sequence[AnalysisRecord]) -> list[CategorySentiment]:
    """One CategorySentiment per category, in first-seen order."""
    grouped: dict[Category, list[Sentiment]] = {}
    for record in records:
        grouped.setdefault(record.category, []).append(record.sentiment)

    analysis = []
    for category, sentiments in grouped.items():
        scores = [SENTIMENT_SCORES[s] for s in sentiments]
        analysis.append(
            CategorySentiment(
                category=category,
                sentiment=dominant_sentiment(sentiments),
                score=round(sum(scores) / len(scores)),
                mentions=len(sentiments),
            )
        )
    return analysis


def _batch_summary(records: Sequence[AnalysisRecord]) -> str:
    if len(records) == 1:
        return records[0].summary
    joined = " | ".join(record.summary for record in records)
    if len(joined) > MAX_BATCH_SUMMARY_CHARS:
        joined = joined[: MAX_BATCH_SUMMARY_CHARS - 3] + "..."
    return f"{len(records)} feedback items: {joined}"


def summarize_records(records: Sequence[AnalysisRecord]) -> HistoricalEntry:
    """
    Fold analysis records into one HistoricalEntry.

    Raises:
        ValueError: If records is empty
    """
    if not records:
        raise ValueError("Cannot summarize an empty set of records")
    return HistoricalEntry(
        overall_sentiment=overall_sentiment(records),
        category_analysis=category_analysis(records),
        summary=_batch_summary(records),
    )
