"""
Analysis record domain models.

AnalysisRecord is the only shape the classification pipeline hands out: a
record either validates completely or is never constructed.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"

    @classmethod
    def canonical(cls, value: Any) -> Sentiment:
        """Fold a free-text sentiment (any case, padded) to the closed set."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        raise ValueError(f"Unknown sentiment: {value!r}")


class Category(str, Enum):
    INFRASTRUCTURE = "Infrastructure"
    TEACHING = "Teaching"
    SUPPORT = "Support"
    SERVICE = "Service"
    OTHER = "Other"

    @classmethod
    def canonical(cls, value: Any) -> Category:
        """Fold a free-text category (any case, padded) to the closed set."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        raise ValueError(f"Unknown category: {value!r}")


class AnalysisRecord(BaseModel):
    """Classification result for one feedback text.

    sentiment/category must match the closed enumerations exactly (case
    included). summary is trimmed and must be non-empty. suggestions keeps
    order, trims every entry and drops empty ones; a non-string entry
    rejects the whole record.
    """

    model_config = ConfigDict(frozen=True)

    sentiment: Sentiment
    category: Category
    summary: StrictStr
    suggestions: list[StrictStr]

    @field_validator("summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("summary cannot be empty")
        return value

    @field_validator("suggestions")
    @classmethod
    def _clean_suggestions(cls, value: list[str]) -> list[str]:
        cleaned = (item.strip() for item in value)
        return [item for item in cleaned if item]

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: {sentiment, category, summary, suggestions}."""
        return self.model_dump(mode="json")
