"""Feedback analysis service: facade between callers and the pipeline.

    feedback text -> prompt -> InvocationEngine -> normalize -> validate
                  -> AnalysisRecord -> FeedbackLog
    records -> HistoricalEntry -> (history snapshot, detect_trends) -> TrendStore

Validation runs once, against the first successful model response. A
malformed response ends the request; remaining candidate models are not
tried.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from feedbackq.analysis.models import AnalysisRecord
from feedbackq.analysis.validator import normalize, validate
from feedbackq.config import TREND_STORE_PATH, FEEDBACK_LOG_PATH, BackendConfig
from feedbackq.llm.errors import InvalidFeedback, SchemaViolation
from feedbackq.llm.gemini import InvocationEngine
from feedbackq.llm.prompts import get_analysis_prompt
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter, log_event
from feedbackq.storage.feedback_log import FeedbackLog
from feedbackq.storage.trend_store import InMemoryTrendStore, JsonFileTrendStore, TrendStore
from feedbackq.trends.aggregate import summarize_records
from feedbackq.trends.detector import detect_trends
from feedbackq.trends.models import HistoricalEntry, TrendEntry

logger = get_logger(__name__)


@dataclass
class TrendReport:
    """The entry just recorded and the negative trends it revealed."""

    entry: HistoricalEntry
    trends: list[TrendEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.entry.to_dict(),
            "continuous_negative_areas": [trend.to_dict() for trend in self.trends],
        }


@dataclass
class AnalysisOutcome:
    record: AnalysisRecord
    report: TrendReport

    def to_dict(self) -> dict[str, Any]:
        return {**self.record.to_dict(), "trends": self.report.to_dict()}


class FeedbackAnalyzer:
    """Classifies feedback and tracks negative trends across classifications."""

    def __init__(
        self,
        engine: InvocationEngine,
        store: TrendStore | None = None,
        feedback_log: FeedbackLog | None = None,
    ):
        self.engine = engine
        self.store = store if store is not None else InMemoryTrendStore()
        self.feedback_log = feedback_log

    @classmethod
    def from_env(cls, persist: bool = True) -> FeedbackAnalyzer:
        """Build an analyzer from environment settings (file-backed when persist=True)."""
        engine = InvocationEngine(BackendConfig.from_env())
        if not persist:
            return cls(engine)
        return cls(
            engine,
            store=JsonFileTrendStore(TREND_STORE_PATH),
            feedback_log=FeedbackLog(FEEDBACK_LOG_PATH),
        )

    def analyze(self, feedback: Any) -> AnalysisRecord:
        """
        Classify one feedback text.

        Raises:
            InvalidFeedback: Text missing, not a string, or blank
            ConfigurationError: API key missing
            InvocationExhausted: No transport/model combination answered
            EmptyResponse / SchemaViolation: The answer was unusable

        Side Effects:
            - Calls the Gemini backend (see InvocationEngine)
            - Appends to the feedback log when one is configured
        """
        if not isinstance(feedback, str) or not feedback.strip():
            raise InvalidFeedback("Feedback text is required and must be a non-empty string")

        text = feedback.strip()
        logger.info("Starting analysis for feedback: %s...", text[:100])

        raw = self.engine.invoke(get_analysis_prompt(text))
        try:
            record = validate(normalize(raw))
        except SchemaViolation as exc:
            log_event("analysis.rejected", field=exc.field, error=str(exc)[:150])
            raise

        counter("analysis.success")
        log_event("analysis.success", sentiment=record.sentiment.value, category=record.category.value)
        self._log_feedback(text, record)
        return record

    def _log_feedback(self, text: str, record: AnalysisRecord) -> None:
        if self.feedback_log is None:
            return
        try:
            self.feedback_log.append(text, record)
        except OSError as exc:
            counter("feedback_log.error")
            logger.error("Error saving feedback to log: %s", exc)

    def track(self, records: Sequence[AnalysisRecord]) -> TrendReport:
        """
        Record one observation built from ``records`` and detect trends.

        The detector runs against the history as it was before this
        observation, so the observation itself counts exactly once.

        A store that cannot be written is logged and counted; the report is
        still returned, built from the history currently held in memory.

        Side Effects:
            - Appends one HistoricalEntry to the trend store
        """
        entry = summarize_records(records)
        try:
            history, stored = self.store.snapshot_and_append(entry)
        except OSError as exc:
            counter("trends.store.persist_error")
            logger.error("Error saving trend data: %s", exc)
            history, stored = self.store.recent(), entry
        trends = detect_trends(stored.category_analysis, history)
        log_event("trends.tracked", history=len(history), trends=len(trends))
        return TrendReport(entry=stored, trends=trends)

    def analyze_and_track(self, feedback: Any) -> AnalysisOutcome:
        record = self.analyze(feedback)
        return AnalysisOutcome(record=record, report=self.track([record]))

    def history(self, limit: int | None = None) -> list[HistoricalEntry]:
        return self.store.recent(limit)

    def sync_status(self) -> dict[str, Any]:
        return self.store.sync_status()
