"""Unit tests for response normalization and AnalysisRecord validation."""

from __future__ import annotations

import json

import pytest

from feedbackq.analysis.models import Category, Sentiment
from feedbackq.analysis.validator import normalize, validate
from feedbackq.llm.errors import EmptyResponse, ResponseParseError, SchemaViolation
from feedbackq.observability.telemetry import get_counter

VALID = {
    "sentiment": "Positive",
    "category": "Teaching",
    "summary": "Instructor explained recursion clearly",
    "suggestions": ["Record lectures", "Share slides early"],
}


def _payload(**overrides):
    data = dict(VALID)
    data.update(overrides)
    return json.dumps(data)


class TestNormalize:
    def test_plain_json_unchanged(self):
        text = _payload()
        assert normalize(f"  {text}\n") == text

    def test_strips_json_code_fence(self):
        text = f"```json\n{_payload()}\n```"
        assert json.loads(normalize(text)) == VALID

    def test_strips_bare_code_fence(self):
        text = f"```\n{_payload()}\n```"
        assert json.loads(normalize(text)) == VALID

    def test_extracts_object_from_surrounding_prose(self):
        text = f"Here is the analysis you asked for:\n{_payload()}\nLet me know!"
        assert json.loads(normalize(text)) == VALID

    def test_braces_inside_strings_do_not_end_the_object(self):
        inner = _payload(summary="Config uses {placeholders} and a stray }")
        result = normalize(f"Result: {inner} trailing")
        assert json.loads(result)["summary"] == "Config uses {placeholders} and a stray }"

    def test_skips_unbalanced_leading_brace(self):
        text = "Oops { not json " + _payload()
        # The first "{" never closes on its own, so the real object is used
        assert json.loads(normalize(text)) == VALID

    @pytest.mark.parametrize("raw", [None, "", "   \n\t", 42])
    def test_empty_or_non_string_raises(self, raw):
        with pytest.raises(EmptyResponse):
            normalize(raw)

    def test_only_fences_raises(self):
        with pytest.raises(EmptyResponse):
            normalize("```json\n```")

    def test_text_without_object_passes_through(self):
        assert normalize("no json here") == "no json here"


class TestValidate:
    def test_valid_record(self):
        record = validate(_payload())
        assert record.sentiment is Sentiment.POSITIVE
        assert record.category is Category.TEACHING
        assert record.summary == VALID["summary"]
        assert record.suggestions == VALID["suggestions"]

    def test_round_trip_through_normalize(self):
        record = validate(normalize(f"```json\n{_payload()}\n```"))
        assert record.to_dict() == VALID

    def test_trims_summary_and_suggestions(self):
        record = validate(_payload(summary="  padded  ", suggestions=["  one ", "", "   ", "two"]))
        assert record.summary == "padded"
        assert record.suggestions == ["one", "two"]

    def test_suggestions_may_end_up_empty(self):
        record = validate(_payload(suggestions=["  ", ""]))
        assert record.suggestions == []

    def test_more_than_five_suggestions_accepted(self):
        suggestions = [f"idea {i}" for i in range(7)]
        assert validate(_payload(suggestions=suggestions)).suggestions == suggestions

    @pytest.mark.parametrize("field", ["sentiment", "category", "summary", "suggestions"])
    def test_missing_field_is_named(self, field):
        data = dict(VALID)
        del data[field]
        with pytest.raises(SchemaViolation) as exc_info:
            validate(json.dumps(data))
        assert exc_info.value.field == field

    @pytest.mark.parametrize("value", ["positive", "Happy", "", 5, None])
    def test_sentiment_outside_enumeration(self, value):
        with pytest.raises(SchemaViolation) as exc_info:
            validate(_payload(sentiment=value))
        assert exc_info.value.field == "sentiment"

    @pytest.mark.parametrize("value", ["Billing", "support", "", ["Support"]])
    def test_category_outside_enumeration(self, value):
        with pytest.raises(SchemaViolation) as exc_info:
            validate(_payload(category=value))
        assert exc_info.value.field == "category"

    @pytest.mark.parametrize("value", ["", "   ", 12, None])
    def test_summary_blank_or_non_string(self, value):
        with pytest.raises(SchemaViolation) as exc_info:
            validate(_payload(summary=value))
        assert exc_info.value.field == "summary"

    def test_non_string_suggestion_rejects_whole_record(self):
        with pytest.raises(SchemaViolation) as exc_info:
            validate(_payload(suggestions=["fine", 3]))
        assert exc_info.value.field == "suggestions"

    def test_suggestions_not_a_sequence(self):
        with pytest.raises(SchemaViolation) as exc_info:
            validate(_payload(suggestions="just one string"))
        assert exc_info.value.field == "suggestions"

    def test_invalid_json_is_parse_error(self):
        with pytest.raises(ResponseParseError) as exc_info:
            validate('{"sentiment": "Positive",')
        assert isinstance(exc_info.value, SchemaViolation)
        assert exc_info.value.field is None
        assert get_counter("analysis.parse_error") == 1

    def test_json_array_is_schema_violation(self):
        with pytest.raises(SchemaViolation) as exc_info:
            validate(json.dumps([VALID]))
        assert exc_info.value.field is None
        assert get_counter("analysis.schema_violation") == 1
