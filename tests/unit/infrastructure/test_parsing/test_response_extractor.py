"""Tests for StructuredResponseExtractor."""

from __future__ import annotations

import json

from typing import Any

import pytest

from codegrade.infrastructure.parsing.response_extractor import (
    StructuredResponseExtractor,
    check_schema,
    locate_record,
    repair_json,
)
from codegrade.shared.exceptions import ExtractionError, SchemaError


@pytest.fixture
def extractor() -> StructuredResponseExtractor:
    return StructuredResponseExtractor()


@pytest.fixture
def record() -> dict[str, Any]:
    category = {"score": 7, "positive_points": [], "negative_points": []}
    return {
        "project_summary": {"project_name": "checkout-tests"},
        "grades": {
            "architecture": dict(category),
            "code_quality": dict(category),
            "validations": dict(category),
            "error_handling": dict(category),
            "overall": {"weighted_score": 7, "final_grade": "B", "summary": "ok"},
        },
        "common_problems": [],
    }


# =============================================================================
# Locating
# =============================================================================


class TestLocateRecord:
    def test_prefers_fenced_block(self) -> None:
        text = 'Intro {"ignored": 1}\n```json\n{"a": {"b": 1}}\n```\nOutro'
        assert locate_record(text) == '{"a": {"b": 1}}'

    def test_unlabelled_fence(self) -> None:
        assert locate_record('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_outermost_braces(self) -> None:
        text = 'Here you go: {"a": {"b": 1}} Thanks!'
        assert locate_record(text) == '{"a": {"b": 1}}'

    def test_no_braces_returns_text(self) -> None:
        assert locate_record("no json here") == "no json here"


# =============================================================================
# Repair
# =============================================================================


class TestRepairJson:
    def test_removes_trailing_commas(self) -> None:
        assert json.loads(repair_json('{"a": [1, 2,], "b": 3,}')) == {
            "a": [1, 2],
            "b": 3,
        }

    def test_keeps_commas_before_closers_inside_strings(self) -> None:
        repaired = repair_json('{"observations": "uses a, ]\tpattern", "x": [1,]}')
        assert json.loads(repaired) == {
            "observations": "uses a, ]\tpattern",
            "x": [1],
        }

    def test_keeps_comma_brace_inside_strings(self) -> None:
        repaired = repair_json('{"text": "a, }", "b": {"c": 1,},}')
        assert json.loads(repaired) == {"text": "a, }", "b": {"c": 1}}

    def test_escapes_raw_newlines_inside_strings(self) -> None:
        repaired = repair_json('{"text": "line one\nline two\tend"}')
        assert json.loads(repaired) == {"text": "line one\nline two\tend"}

    def test_leaves_structural_whitespace_alone(self) -> None:
        assert repair_json('{\n  "a": 1\n}') == '{\n  "a": 1\n}'

    def test_clips_to_balanced_object(self) -> None:
        repaired = repair_json('{"a": {"b": "}"}} trailing } junk')
        assert json.loads(repaired) == {"a": {"b": "}"}}


# =============================================================================
# Schema check
# =============================================================================


class TestCheckSchema:
    def test_valid_record_passes(self, record: dict[str, Any]) -> None:
        check_schema(record)

    def test_missing_top_level_sections(self) -> None:
        with pytest.raises(SchemaError) as exc_info:
            check_schema({"common_problems": []})
        assert exc_info.value.missing == ["project_summary", "grades"]

    def test_missing_grade_section(self, record: dict[str, Any]) -> None:
        del record["grades"]["validations"]
        with pytest.raises(SchemaError) as exc_info:
            check_schema(record)
        assert exc_info.value.missing == ["grades.validations"]

    def test_non_object_record(self) -> None:
        with pytest.raises(SchemaError):
            check_schema([1, 2, 3])


# =============================================================================
# End to end
# =============================================================================


class TestExtract:
    def test_plain_json(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        assert extractor.extract(json.dumps(record)) == record

    def test_fenced_json_with_prose(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        text = f"Here is the analysis:\n```json\n{json.dumps(record, indent=2)}\n```\n"
        assert extractor.extract(text) == record

    def test_labelled_json(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        assert extractor.extract(f"JSON: {json.dumps(record)}") == record

    def test_extraction_is_idempotent(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        first = extractor.extract(f"```json\n{json.dumps(record)}\n```")
        assert extractor.extract(json.dumps(first)) == first

    def test_repairs_trailing_commas(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        text = json.dumps(record).replace(
            '"common_problems": []', '"common_problems": [],'
        )
        assert extractor.extract(text) == record

    def test_repairs_control_characters(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        record["grades"]["overall"]["summary"] = "first line\nsecond line"
        text = json.dumps(record).replace("\\n", "\n")

        result = extractor.extract(text)

        assert result["grades"]["overall"]["summary"] == "first line\nsecond line"

    def test_repairs_trailing_garbage(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        text = json.dumps(record) + " Note: the closing } above ends it."
        assert extractor.extract(text) == record

    def test_unrecoverable_text_raises_with_raw_text(
        self, extractor: StructuredResponseExtractor
    ) -> None:
        raw = "I'm sorry, I cannot grade these files."
        with pytest.raises(ExtractionError) as exc_info:
            extractor.extract(raw)
        assert exc_info.value.raw_text == raw

    def test_truncated_json_raises(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        text = json.dumps(record)[:-40]
        with pytest.raises(ExtractionError):
            extractor.extract(text)

    def test_parsed_but_incomplete_raises_schema_error(
        self, extractor: StructuredResponseExtractor, record: dict[str, Any]
    ) -> None:
        del record["grades"]["overall"]
        with pytest.raises(SchemaError) as exc_info:
            extractor.extract(json.dumps(record))
        assert exc_info.value.missing == ["grades.overall"]
