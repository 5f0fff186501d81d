"""
Command-line entry point for feedbackq.

Usage:
    feedbackq analyze "The app crashes on login" [--track]
    feedbackq batch feedback.txt [--track]
    feedbackq trends [--limit N]
    feedbackq status
    feedbackq models

All commands print JSON to stdout. Failures print an error payload and exit
with status 1 (2 for usage errors).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from feedbackq.analysis.batch import BatchProcessor
from feedbackq.analysis.service import FeedbackAnalyzer
from feedbackq.config import APP_VERSION
from feedbackq.llm.discovery import list_candidate_models
from feedbackq.llm.errors import FeedbackAnalysisError, error_payload
from feedbackq.observability.logging import get_logger

logger = get_logger(__name__)


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _read_feedback_file(path: Path) -> list[str]:
    """One feedback text per line; blank lines are skipped by the batch processor."""
    return path.read_text(encoding="utf-8").splitlines()


def _cmd_analyze(args: argparse.Namespace, analyzer: FeedbackAnalyzer) -> int:
    if args.track:
        _emit(analyzer.analyze_and_track(args.text).to_dict())
    else:
        _emit(analyzer.analyze(args.text).to_dict())
    return 0


def _cmd_batch(args: argparse.Namespace, analyzer: FeedbackAnalyzer) -> int:
    try:
        texts = _read_feedback_file(args.file)
    except OSError as exc:
        print(f"Cannot read {args.file}: {exc}", file=sys.stderr)
        return 2
    result = BatchProcessor(analyzer).run(texts, track_trends=args.track)
    _emit(result.to_dict())
    return 0 if result.failed == 0 else 1


def _cmd_trends(args: argparse.Namespace, analyzer: FeedbackAnalyzer) -> int:
    _emit([entry.to_dict() for entry in analyzer.history(args.limit)])
    return 0


def _cmd_status(args: argparse.Namespace, analyzer: FeedbackAnalyzer) -> int:
    _emit(analyzer.sync_status())
    return 0


def _cmd_models(args: argparse.Namespace, analyzer: FeedbackAnalyzer) -> int:
    _emit({"models": list_candidate_models(analyzer.engine.config)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedbackq",
        description="Classify customer feedback with Gemini and track negative trends",
    )
    parser.add_argument("--version", action="version", version=f"feedbackq {APP_VERSION}")
    parser.add_argument(
        "--no-persist",
        action="store_true",
        help="Keep trend history in memory only (nothing written to disk)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Classify one feedback text")
    analyze.add_argument("text", help="Feedback text")
    analyze.add_argument("--track", action="store_true", help="Record the result for trend detection")
    analyze.set_defaults(handler=_cmd_analyze)

    batch = subparsers.add_parser("batch", help="Classify every line of a file")
    batch.add_argument("file", type=Path, help="Text file with one feedback per line")
    batch.add_argument("--track", action="store_true", help="Record the batch as one trend observation")
    batch.set_defaults(handler=_cmd_batch)

    trends = subparsers.add_parser("trends", help="Print stored trend history")
    trends.add_argument("--limit", type=int, default=None, help="Only the N most recent entries")
    trends.set_defaults(handler=_cmd_trends)

    status = subparsers.add_parser("status", help="Print trend store sync status")
    status.set_defaults(handler=_cmd_status)

    models = subparsers.add_parser("models", help="List candidate models")
    models.set_defaults(handler=_cmd_models)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    analyzer = FeedbackAnalyzer.from_env(persist=not args.no_persist)

    try:
        return args.handler(args, analyzer)
    except FeedbackAnalysisError as exc:
        logger.error("%s failed: %s", args.command, exc)
        _emit(error_payload(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
