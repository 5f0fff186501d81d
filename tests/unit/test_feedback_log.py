from __future__ import annotations

import json

from feedbackq.analysis.models import AnalysisRecord
from feedbackq.storage.feedback_log import FeedbackLog


def _record(summary="Great course"):
    return AnalysisRecord(
        sentiment="Positive", category="Teaching", summary=summary, suggestions=["More labs"]
    )


def test_append_writes_one_json_line(tmp_path):
    log = FeedbackLog(tmp_path / "logs" / "feedback.jsonl")

    log.append("Loved the labs", _record())

    lines = (tmp_path / "logs" / "feedback.jsonl").read_text().splitlines()
    assert len(lines) == 1
    row = json.loads(lines[0])
    assert row["feedback"] == "Loved the labs"
    assert row["sentiment"] == "Positive"
    assert row["suggestions"] == ["More labs"]
    assert "timestamp" in row


def test_recent_is_newest_first_and_skips_bad_lines(tmp_path):
    path = tmp_path / "feedback.jsonl"
    log = FeedbackLog(path)
    log.append("first", _record("one"))
    with path.open("a") as fp:
        fp.write("{broken\n\n")
    log.append("second", _record("two"))

    rows = log.recent()

    assert [r["feedback"] for r in rows] == ["second", "first"]
    assert [r["feedback"] for r in log.recent(limit=1)] == ["second"]


def test_recent_on_missing_file(tmp_path):
    assert FeedbackLog(tmp_path / "none.jsonl").recent() == []
