"""
Append-only JSONL log of classified feedback.

One line per analysed feedback: the text plus its AnalysisRecord fields.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from feedbackq.analysis.models import AnalysisRecord
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter
from feedbackq.trends.models import utc_now

logger = get_logger(__name__)


class FeedbackLog:
    """JSONL sink for classified feedback records."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, feedback: str, record: AnalysisRecord) -> None:
        """
        Append one classified feedback line.

        Side Effects:
            - Creates the parent directory if needed
            - Appends to the JSONL file
        """
        row = {
            "timestamp": utc_now().isoformat(timespec="seconds"),
            "feedback": feedback,
            **record.to_dict(),
        }
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fp:
                fp.write(json.dumps(row, ensure_ascii=False) + "\n")
        counter("feedback_log.append")

    def recent(self, limit: int = 100) -> list[dict[str, Any]]:
        """Most recent rows, newest first. Unparseable lines are skipped."""
        if not self.path.exists():
            return []
        with self._lock:
            lines = self.path.read_text(encoding="utf-8").splitlines()

        rows = []
        for line in reversed(lines):
            if len(rows) >= limit:
                break
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning("Skipping unparseable feedback log line")
        return rows
