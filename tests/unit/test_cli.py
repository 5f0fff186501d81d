"""Tests for the feedbackq command line."""

from __future__ import annotations

import json
from dataclasses import replace

import pytest

from conftest import FakeTransport, analysis_json
from feedbackq import cli
from feedbackq.analysis.service import FeedbackAnalyzer
from feedbackq.llm.gemini import InvocationEngine


@pytest.fixture
def use_analyzer(monkeypatch):
    """Make the CLI use a prepared analyzer instead of one built from env."""

    def _use(analyzer):
        monkeypatch.setattr(cli.FeedbackAnalyzer, "from_env", lambda persist=True: analyzer)
        return analyzer

    return _use


def test_analyze_prints_record(use_analyzer, make_analyzer, capsys):
    use_analyzer(make_analyzer(analysis_json("Neutral", "Service")))

    assert cli.main(["analyze", "The cafeteria is fine"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["sentiment"] == "Neutral"
    assert output["category"] == "Service"


def test_analyze_track_includes_trends(use_analyzer, make_analyzer, capsys):
    use_analyzer(make_analyzer())

    cli.main(["analyze", "No reply from support", "--track"])

    output = json.loads(capsys.readouterr().out)
    assert output["trends"]["continuous_negative_areas"][0]["category"] == "Support"


def test_error_prints_payload_and_exits_non_zero(use_analyzer, make_engine, capsys):
    use_analyzer(FeedbackAnalyzer(make_engine([FakeTransport("rest")])))

    assert cli.main(["analyze", "Anything"]) == 1

    output = json.loads(capsys.readouterr().out)
    assert output["kind"] == "backend_unavailable"


def test_batch_reads_one_feedback_per_line(use_analyzer, make_analyzer, tmp_path, capsys):
    feedback_file = tmp_path / "feedback.txt"
    feedback_file.write_text("first\n\nsecond\n")
    use_analyzer(make_analyzer())

    assert cli.main(["batch", str(feedback_file), "--track"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["processed"] == 2
    assert output["skipped"] == 1
    assert "trends" in output


def test_batch_missing_file(use_analyzer, make_analyzer, tmp_path):
    use_analyzer(make_analyzer())
    assert cli.main(["batch", str(tmp_path / "missing.txt")]) == 2


def test_trends_and_status(use_analyzer, make_analyzer, capsys):
    analyzer = use_analyzer(make_analyzer())
    analyzer.analyze_and_track("Slow support")
    analyzer.analyze_and_track("Slow support")

    cli.main(["trends", "--limit", "1"])
    history = json.loads(capsys.readouterr().out)
    assert len(history) == 1

    cli.main(["status"])
    status = json.loads(capsys.readouterr().out)
    assert status["total_records"] == 2


def test_models_uses_fallback_without_key(use_analyzer, backend_config, capsys):
    engine = InvocationEngine(replace(backend_config, api_key=None), transports=[])
    use_analyzer(FeedbackAnalyzer(engine))

    cli.main(["models"])

    assert json.loads(capsys.readouterr().out) == {"models": ["gemini-pro", "gemini-1.5-flash"]}


def test_command_required():
    with pytest.raises(SystemExit):
        cli.main([])
