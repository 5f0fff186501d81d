"""
Response normalization and schema validation.

Models are asked for bare JSON but routinely wrap it in Markdown fences or
prose. ``normalize`` recovers the JSON object text; ``validate`` parses it and
enforces the AnalysisRecord contract, naming the offending field on failure.
"""

from __future__ import annotations

import json
import re

from pydantic import ValidationError

from feedbackq.analysis.models import AnalysisRecord
from feedbackq.llm.errors import EmptyResponse, ResponseParseError, SchemaViolation
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter, log_event

logger = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def _is_json_object(text: str) -> bool:
    try:
        return isinstance(json.loads(text), dict)
    except json.JSONDecodeError:
        return False


def _first_balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span, ignoring braces inside strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this brace; try the next opening brace
        start = text.find("{", start + 1)
    return None


def normalize(raw_text: str | None) -> str:
    """
    Strip fencing and surrounding prose from a raw model response.

    Raises:
        EmptyResponse: If the response is None, not a string, or blank
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise EmptyResponse("Invalid response from AI: empty or non-string response")

    cleaned = _FENCE_PATTERN.sub("", raw_text.strip()).strip()
    if not cleaned:
        raise EmptyResponse("Response contained only code fences")

    if _is_json_object(cleaned):
        return cleaned

    span = _first_balanced_object(cleaned)
    if span is not None:
        logger.debug("Extracted JSON object from wrapped response (%d chars)", len(span))
        return span
    return cleaned


def validate(candidate_json: str) -> AnalysisRecord:
    """
    Parse and validate normalized model output.

    Raises:
        ResponseParseError: If the text is not valid JSON
        SchemaViolation: If the object breaks the AnalysisRecord contract

    Side Effects:
        - Increments analysis.* counters on failure
    """
    try:
        data = json.loads(candidate_json)
    except json.JSONDecodeError as exc:
        counter("analysis.parse_error")
        log_event("analysis.parse_error", error=str(exc), preview=candidate_json[:100])
        raise ResponseParseError(f"Failed to parse JSON response: {exc}") from exc

    if not isinstance(data, dict):
        counter("analysis.schema_violation")
        raise SchemaViolation(
            f"Expected a JSON object, got {type(data).__name__}", field=None
        )

    try:
        return AnalysisRecord.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = first.get("loc") or ()
        field = str(loc[0]) if loc else None
        counter("analysis.schema_violation")
        log_event("analysis.schema_violation", field=field, error=first.get("msg"))
        raise SchemaViolation(
            f"Missing or invalid {field} field: {first.get('msg')}", field=field
        ) from exc
