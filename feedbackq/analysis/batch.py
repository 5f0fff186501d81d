"""
Sequential batch analysis.

Items are classified one at a time with a fixed pause between them to stay
under backend rate limits. One item's failure is recorded on that item and
the batch continues. Cancellation is checked before each item; an in-flight
model call is never interrupted.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from feedbackq.analysis.models import AnalysisRecord
from feedbackq.analysis.service import FeedbackAnalyzer, TrendReport
from feedbackq.config import BATCH_PAUSE_SECONDS
from feedbackq.llm.errors import FeedbackAnalysisError
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter, log_event

logger = get_logger(__name__)

_ERROR_PREVIEW_CHARS = 100


@dataclass
class BatchItemResult:
    row: int
    feedback: str
    record: AnalysisRecord | None = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    def to_dict(self) -> dict[str, Any]:
        if self.record is not None:
            return {"row": self.row, "feedback": self.feedback, **self.record.to_dict()}
        return {
            "row": self.row,
            "feedback": self.feedback[:_ERROR_PREVIEW_CHARS],
            "error": self.error,
            "error_kind": self.error_kind,
        }


@dataclass
class BatchResult:
    results: list[BatchItemResult] = field(default_factory=list)
    skipped: int = 0
    cancelled: bool = False
    trends: TrendReport | None = None

    @property
    def processed(self) -> int:
        return sum(1 for item in self.results if item.ok)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.results if not item.ok)

    @property
    def records(self) -> list[AnalysisRecord]:
        return [item.record for item in self.results if item.record is not None]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "processed": self.processed,
            "failed": self.failed,
            "skipped": self.skipped,
            "cancelled": self.cancelled,
            "results": [item.to_dict() for item in self.results],
        }
        if self.trends is not None:
            payload["trends"] = self.trends.to_dict()
        return payload


class BatchProcessor:
    """Runs FeedbackAnalyzer.analyze over many texts, one at a time."""

    def __init__(
        self,
        analyzer: FeedbackAnalyzer,
        pause_seconds: float = BATCH_PAUSE_SECONDS,
        sleep_fn: Callable[[float], None] = time.sleep,
    ):
        self.analyzer = analyzer
        self.pause_seconds = pause_seconds
        self.sleep_fn = sleep_fn

    def run(
        self,
        texts: Iterable[Any],
        cancel_event: threading.Event | None = None,
        track_trends: bool = False,
    ) -> BatchResult:
        """
        Analyze every non-blank text in order.

        Args:
            texts: Feedback texts; rows are numbered from 1 in input order
            cancel_event: When set, stop before starting the next item
            track_trends: Fold successful records into one trend observation

        Side Effects:
            - One analysis (model calls) per non-blank item
            - Sleeps pause_seconds between items
            - Appends to the trend store when track_trends is set
        """
        items = list(texts)
        result = BatchResult()
        logger.info("Processing %d feedback item(s)...", len(items))
        started = False

        for row, text in enumerate(items, start=1):
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                logger.warning("Batch cancelled before row %d", row)
                log_event("batch.cancelled", row=row, total=len(items))
                break

            if not isinstance(text, str) or not text.strip():
                result.skipped += 1
                logger.warning("Row %d: feedback is empty, skipping", row)
                continue

            if started and self.pause_seconds > 0:
                self.sleep_fn(self.pause_seconds)
            started = True

            feedback = text.strip()
            try:
                record = self.analyzer.analyze(feedback)
            except FeedbackAnalysisError as exc:
                counter("batch.item.error")
                logger.error("Error processing row %d: %s", row, exc)
                result.results.append(
                    BatchItemResult(
                        row=row, feedback=feedback, error=str(exc), error_kind=exc.kind.value
                    )
                )
                continue

            counter("batch.item.success")
            result.results.append(BatchItemResult(row=row, feedback=feedback, record=record))

        if track_trends and result.records:
            result.trends = self.analyzer.track(result.records)

        logger.info(
            "Batch processing complete: %d successful, %d errors, %d skipped",
            result.processed,
            result.failed,
            result.skipped,
        )
        log_event(
            "batch.complete",
            processed=result.processed,
            failed=result.failed,
            skipped=result.skipped,
            cancelled=result.cancelled,
        )
        return result
