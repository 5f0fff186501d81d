"""feedbackq - Customer feedback classification and negative trend detection"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so lightweight modules (models, trends) load without the LLM stack
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name in ("AnalysisRecord", "Category", "Sentiment"):
        from feedbackq.analysis import models

        return getattr(models, name)

    if name in ("FeedbackAnalyzer", "TrendReport", "AnalysisOutcome"):
        from feedbackq.analysis import service

        return getattr(service, name)

    if name == "BatchProcessor":
        from feedbackq.analysis.batch import BatchProcessor

        return BatchProcessor

    if name in ("HistoricalEntry", "TrendEntry", "Priority"):
        from feedbackq.trends import models as trend_models

        return getattr(trend_models, name)

    if name == "detect_trends":
        from feedbackq.trends.detector import detect_trends

        return detect_trends

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AnalysisRecord",
    "Category",
    "Sentiment",
    "FeedbackAnalyzer",
    "TrendReport",
    "AnalysisOutcome",
    "BatchProcessor",
    "HistoricalEntry",
    "TrendEntry",
    "Priority",
    "detect_trends",
]
