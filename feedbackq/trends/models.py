"""
Trend tracking domain models.

HistoricalEntry is the persisted snapshot of one analysed record or batch;
TrendEntry is what the detector reports per persistently negative category.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from feedbackq.analysis.models import Category, Sentiment
from feedbackq.config import HIGH_PRIORITY_STREAK, MEDIUM_PRIORITY_STREAK


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


class CategorySentiment(BaseModel):
    """One category's sentiment within a HistoricalEntry (or the current observation)."""

    model_config = ConfigDict(frozen=True)

    category: Category
    sentiment: Sentiment
    score: int = Field(default=0, ge=0, le=100)
    mentions: int = Field(default=1, ge=0)

    @field_validator("category", mode="before")
    @classmethod
    def _canonical_category(cls, value: Any) -> Category:
        return Category.canonical(value)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _canonical_sentiment(cls, value: Any) -> Sentiment:
        return Sentiment.canonical(value)


class OverallSentiment(BaseModel):
    """Share of records per sentiment, as integer percentages."""

    model_config = ConfigDict(frozen=True)

    positive: int = Field(default=0, ge=0, le=100)
    neutral: int = Field(default=0, ge=0, le=100)
    negative: int = Field(default=0, ge=0, le=100)


class HistoricalEntry(BaseModel):
    """
    Durable snapshot of one past analysis.

    Persisted as {timestamp, overall_sentiment, category_analysis, summary}.
    category_analysis holds at most one tuple per category; later duplicates
    are dropped when the entry is parsed.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    overall_sentiment: OverallSentiment | None = None
    category_analysis: list[CategorySentiment] = Field(default_factory=list)
    summary: str = ""

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("category_analysis")
    @classmethod
    def _one_per_category(cls, value: list[CategorySentiment]) -> list[CategorySentiment]:
        seen: set[Category] = set()
        unique = []
        for item in value:
            if item.category not in seen:
                seen.add(item.category)
                unique.append(item)
        return unique

    def find(self, category: Category) -> CategorySentiment | None:
        for item in self.category_analysis:
            if item.category == category:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def for_streak(cls, streak: int) -> Priority:
        if streak >= HIGH_PRIORITY_STREAK:
            return cls.HIGH
        if streak >= MEDIUM_PRIORITY_STREAK:
            return cls.MEDIUM
        return cls.LOW


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


@dataclass(frozen=True)
class TrendEntry:
    """A category that is negative now, with how long it has been negative."""

    category: Category
    consecutive_negative_cycles: int
    current_sentiment_score: int

    def __post_init__(self) -> None:
        if self.consecutive_negative_cycles < 1:
            raise ValueError("consecutive_negative_cycles must be >= 1")

    @property
    def priority(self) -> Priority:
        return Priority.for_streak(self.consecutive_negative_cycles)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "consecutive_negative_cycles": self.consecutive_negative_cycles,
            "priority": self.priority.value,
            "current_sentiment_score": self.current_sentiment_score,
        }
