"""Recovers a JSON record from free-form LLM response text."""

from __future__ import annotations

import json
import logging
import re

from dataclasses import dataclass
from typing import Any

from codegrade.shared.exceptions import ExtractionError, SchemaError
from codegrade.shared.types import GradeCategory

logger = logging.getLogger(__name__)

# Tried in order; the first match wins.
_RECORD_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```"),
    re.compile(r"(\{[\s\S]*\})"),
    re.compile(r"JSON[:\s]+(\{[\s\S]*\})", re.IGNORECASE),
)

_CLOSER_AHEAD = re.compile(r"\s*[}\]]")

_CONTROL_ESCAPES: dict[str, str] = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

REQUIRED_SECTIONS = ("project_summary", "grades")
REQUIRED_GRADE_SECTIONS = (*(c.value for c in GradeCategory), "overall")

# =============================================================================
# EXTRACTOR
# =============================================================================


@dataclass
class StructuredResponseExtractor:
    """Locates, parses, repairs and shape-checks a batch assessment record."""

    def extract(self, raw_text: str) -> dict[str, Any]:
        """Recover the assessment record from *raw_text*.

        Raises:
            ExtractionError: If no parseable record can be recovered, even
                after repair. Carries the raw text for debug artifacts.
            SchemaError: If the record lacks a required section.
        """
        candidate = locate_record(raw_text)
        try:
            record = json.loads(candidate)
        except json.JSONDecodeError as parse_error:
            logger.warning("Initial JSON parse failed: %s", parse_error)
            logger.warning("Attempting JSON repair")
            try:
                record = json.loads(repair_json(candidate))
            except json.JSONDecodeError:
                raise ExtractionError(str(parse_error), raw_text) from parse_error
            logger.info("JSON successfully repaired and parsed")

        check_schema(record)
        return record


# =============================================================================
# STAGES
# =============================================================================


def locate_record(text: str) -> str:
    """Return the most likely JSON substring, or *text* when none matches."""
    for pattern in _RECORD_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return text


def repair_json(text: str) -> str:
    """Apply best-effort fixes for common model JSON mistakes.

    1. Drop trailing commas before ``}`` / ``]`` outside string literals.
    2. Escape raw control characters inside string literals.
    3. Clip to the first ``{`` and its matching ``}``.
    """
    return _clip_to_object(_scrub_literals(text))


def check_schema(record: Any) -> None:
    """Ensure the record has every required top-level and grade section.

    Raises:
        SchemaError: Listing the missing sections.
    """
    if not isinstance(record, dict):
        raise SchemaError(list(REQUIRED_SECTIONS))

    missing = [
        name for name in REQUIRED_SECTIONS if not isinstance(record.get(name), dict)
    ]
    grades = record.get("grades")
    if isinstance(grades, dict):
        missing.extend(
            f"grades.{name}"
            for name in REQUIRED_GRADE_SECTIONS
            if not isinstance(grades.get(name), dict)
        )

    if missing:
        raise SchemaError(missing)


# =============================================================================
# REPAIR HELPERS
# =============================================================================


def _scrub_literals(text: str) -> str:
    """Escape control characters in strings and drop dangling commas outside them."""
    out: list[str] = []
    in_string = False
    escaped = False
    for index, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch in _CONTROL_ESCAPES:
                out.append(_CONTROL_ESCAPES[ch])
                continue
            elif ord(ch) < 0x20:
                out.append(f"\\u{ord(ch):04x}")
                continue
        elif ch == '"':
            in_string = True
        elif ch == "," and _closes_next(text, index + 1):
            continue
        out.append(ch)
    return "".join(out)


def _closes_next(text: str, start: int) -> bool:
    """True when the next non-whitespace character closes an object or array."""
    return _CLOSER_AHEAD.match(text, start) is not None


def _clip_to_object(text: str) -> str:
    start = text.find("{")
    if start < 0:
        return text

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]

    # Unbalanced: fall back to the last closing brace.
    end = text.rfind("}")
    return text[start : end + 1] if end > start else text[start:]
