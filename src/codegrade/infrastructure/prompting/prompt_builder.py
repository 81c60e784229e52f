"""Prompt rendering for batch assessments."""

from __future__ import annotations

import json
import logging

from pathlib import Path

from codegrade.domain.batching.value_objects import Batch
from codegrade.shared.exceptions import ConfigurationError
from codegrade.shared.types import GradeCategory

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a senior reviewer of test-automation codebases. You grade source code \
for architecture, code quality, validations and error handling, and you always \
answer with a single valid JSON document and nothing else.
"""

RUBRIC = """\
## Grading rubric

Score every category from 1 to 10.

- architecture (25%): layering, page objects / service objects, separation of \
test data, configuration and test logic, reuse of shared components.
- code_quality (30%): naming, duplication, method size, readability, dead code, \
adherence to language conventions.
- validations (25%): meaningful assertions, explicit waits instead of sleeps, \
verification of both positive and negative paths.
- error_handling (20%): exception handling, logging, diagnostics on failure, \
resource cleanup.

Compute the weighted score with the weights above and map it to a final grade: \
A >= 9.0, B >= 7.0, C >= 5.0, D >= 3.0, otherwise F.
"""

_OUTPUT_RULES = """\
## Critical instructions

1. Return ONLY the JSON document, with no text before or after it.
2. Identify at least 5 common problems.
3. List the 10 most critical issues in top_issues.
4. Provide at least 7 prioritized recommendations.
5. The JSON must be valid: double-quoted strings, no trailing commas, \
escaped special characters (\\n, \\t, \\", \\\\), no comments.
"""


def _output_shape(project_name: str, analysis_date: str, project_type: str) -> str:
    category = {
        "score": 0,
        "weight": 0,
        "positive_points": ["..."],
        "negative_points": ["..."],
        "observations": "...",
    }
    grades: dict[str, object] = {
        c.value: {**category, "weight": c.weight} for c in GradeCategory
    }
    grades["overall"] = {
        "weighted_score": 0,
        "final_grade": "A/B/C/D/F",
        "summary": "...",
    }
    shape = {
        "project_summary": {
            "project_name": project_name,
            "total_files": 0,
            "total_classes": 0,
            "analysis_date": analysis_date,
            "project_type": project_type,
        },
        "grades": grades,
        "common_problems": [
            {
                "title": "...",
                "description": "...",
                "severity": "high/medium/low",
                "occurrences": 0,
                "affected_files": ["File.java"],
            }
        ],
        "top_issues": [
            {
                "file": "File.java",
                "class_name": "ClassName",
                "method": "methodName()",
                "issue": "...",
                "suggestion": "...",
            }
        ],
        "recommendations": [
            {
                "category": "...",
                "priority": "high/medium/low",
                "description": "...",
                "impact": "...",
            }
        ],
    }
    return json.dumps(shape, indent=2)


def build_batch_prompt(
    batch: Batch,
    project_name: str,
    analysis_date: str,
    project_type: str,
    rubric: str = RUBRIC,
) -> str:
    """Render the full user prompt for one batch.

    The grading *rubric* comes first, followed by the required output format
    and the batch files.
    """
    files = "\n".join(
        _file_section(index, item.name, item.path, item.content)
        for index, item in enumerate(batch, start=1)
    )
    shape = _output_shape(project_name, analysis_date, project_type)
    return (
        f"{rubric.rstrip()}\n\n---\n\n"
        f"## Required output format\n\n```json\n{shape}\n```\n\n"
        f"{_OUTPUT_RULES}\n---\n\n"
        f"## Files to analyze\n\n{files}\n---\n\n"
        "Analyze every file above against the rubric and return the JSON document."
    )


def _file_section(index: int, name: str, path: str, content: str) -> str:
    return f"### File {index}: {name}\n**Path:** {path}\n\n```\n{content}\n```\n"


def load_rubric(path: Path) -> str:
    """Read a custom grading rubric from a markdown file.

    Raises:
        ConfigurationError: If the file cannot be read or is empty.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Failed to load analysis prompt template {path}: {e}"
        raise ConfigurationError(msg) from e
    if not text.strip():
        msg = f"Failed to load analysis prompt template {path}: file is empty"
        raise ConfigurationError(msg)
    logger.info("Using grading rubric from %s", path)
    return text
