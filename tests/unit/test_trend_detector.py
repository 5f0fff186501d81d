"""Unit tests for consecutive-negative trend detection."""

from __future__ import annotations

import random

import pytest

from feedbackq.analysis.models import Category
from feedbackq.trends.detector import detect_trends, negative_streak
from feedbackq.trends.models import CategorySentiment, HistoricalEntry, Priority, TrendEntry


def entry(**readings):
    """HistoricalEntry from keyword category=sentiment pairs."""
    return HistoricalEntry(
        category_analysis=[
            {"category": category, "sentiment": sentiment, "score": 20}
            for category, sentiment in readings.items()
        ]
    )


def current(category, sentiment="Negative", score=20):
    return CategorySentiment(category=category, sentiment=sentiment, score=score)


def test_positive_entry_breaks_the_streak():
    history = [
        entry(Infrastructure="Negative"),
        entry(Infrastructure="Negative"),
        entry(Infrastructure="Negative"),
        entry(Infrastructure="Positive"),
    ]

    trends = detect_trends([current("Infrastructure", score=40)], history)

    assert trends == [TrendEntry(Category.INFRASTRUCTURE, 1, 40)]
    assert trends[0].priority is Priority.LOW


def test_five_cycle_streak_is_high_priority():
    history = [entry(Support="Negative") for _ in range(4)]

    trends = detect_trends([current("Support", score=15)], history)

    assert len(trends) == 1
    assert trends[0].consecutive_negative_cycles == 5
    assert trends[0].priority is Priority.HIGH
    assert trends[0].current_sentiment_score == 15


def test_missing_category_breaks_the_streak():
    history = [entry(Service="Negative"), entry(Teaching="Negative"), entry(Service="Negative")]

    assert negative_streak(Category.SERVICE, history) == 2


def test_empty_history_gives_streak_one():
    trends = detect_trends([current("Other")], [])
    assert trends[0].consecutive_negative_cycles == 1


def test_non_negative_current_readings_are_ignored():
    history = [entry(Support="Negative") for _ in range(4)]

    trends = detect_trends(
        [current("Support", sentiment="Neutral"), current("Teaching", sentiment="Positive")],
        history,
    )

    assert trends == []


def test_legacy_lowercase_history_matches():
    history = [
        HistoricalEntry.model_validate(
            {
                "timestamp": "2024-03-01T10:00:00",
                "category_analysis": [{"category": "support", "sentiment": "negative", "score": 10}],
            }
        )
        for _ in range(2)
    ]

    trends = detect_trends([current("Support")], history)

    assert trends[0].consecutive_negative_cycles == 3
    assert trends[0].priority is Priority.MEDIUM


@pytest.mark.parametrize(
    "streak, expected",
    [(1, Priority.LOW), (2, Priority.LOW), (3, Priority.MEDIUM), (4, Priority.MEDIUM), (5, Priority.HIGH), (9, Priority.HIGH)],
)
def test_priority_thresholds(streak, expected):
    history = [entry(Teaching="Negative") for _ in range(streak - 1)]
    assert detect_trends([current("Teaching")], history)[0].priority is expected


def test_sorted_by_priority_then_streak():
    history = (
        [entry(Support="Negative", Service="Negative")] * 2
        + [entry(Support="Negative", Service="Negative", Infrastructure="Negative")] * 3
    )

    trends = detect_trends(
        [current("Infrastructure"), current("Teaching"), current("Support"), current("Service")],
        history,
    )

    assert [(t.category.value, t.consecutive_negative_cycles) for t in trends] == [
        ("Support", 6),
        ("Service", 6),
        ("Infrastructure", 4),
        ("Teaching", 1),
    ]


def test_sort_order_is_non_increasing_for_random_histories():
    rng = random.Random(7)
    categories = [c.value for c in Category]
    sentiments = ["Positive", "Neutral", "Negative"]

    for _ in range(50):
        history = [
            entry(**{c: rng.choice(sentiments) for c in rng.sample(categories, k=rng.randint(0, 5))})
            for _ in range(rng.randint(0, 12))
        ]
        now = [current(c, sentiment=rng.choice(sentiments)) for c in categories]

        keys = [(t.priority.rank, t.consecutive_negative_cycles) for t in detect_trends(now, history)]
        assert keys == sorted(keys, reverse=True)


def test_trend_entry_wire_shape():
    trend = TrendEntry(Category.SUPPORT, 3, 25)
    assert trend.to_dict() == {
        "category": "Support",
        "consecutive_negative_cycles": 3,
        "priority": "Medium",
        "current_sentiment_score": 25,
    }


def test_trend_entry_rejects_zero_cycles():
    with pytest.raises(ValueError):
        TrendEntry(Category.SUPPORT, 0, 25)
