"""Pydantic schema for a batch assessment and its conversion to domain types."""

from __future__ import annotations

import logging

from typing import Any

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from codegrade.domain.grading.value_objects import (
    BatchAssessment,
    CategoryGrade,
    OverallGrade,
    Problem,
    ProjectSummary,
    Recommendation,
    TopIssue,
)
from codegrade.shared.exceptions import SchemaError
from codegrade.shared.types import GradeCategory, LetterGrade, Severity

logger = logging.getLogger(__name__)

_SEVERITY_MAP: dict[str, Severity] = {
    "high": Severity.HIGH,
    "medium": Severity.MEDIUM,
    "low": Severity.LOW,
}

_MIN_SCORE = 0.0
_MAX_SCORE = 10.0

# =============================================================================
# STRUCTURED OUTPUT SCHEMA
# =============================================================================


class _Lenient(BaseModel):
    """Treats explicit JSON nulls as missing so field defaults apply."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class _ProjectSummaryOutput(_Lenient):
    project_name: str = ""
    total_files: int = 0
    total_classes: int = 0
    analysis_date: str = ""
    project_type: str = ""


class _CategoryOutput(_Lenient):
    score: float = 0.0
    positive_points: list[str] = []
    negative_points: list[str] = []
    observations: str = ""

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, value: float) -> float:
        return max(_MIN_SCORE, min(_MAX_SCORE, value))


class _OverallOutput(_Lenient):
    weighted_score: float = 0.0
    final_grade: str = ""
    summary: str = ""


class _GradesOutput(_Lenient):
    architecture: _CategoryOutput
    code_quality: _CategoryOutput
    validations: _CategoryOutput
    error_handling: _CategoryOutput
    overall: _OverallOutput


class _ProblemOutput(_Lenient):
    title: str
    description: str = ""
    severity: str = "medium"
    occurrences: int = 1
    affected_files: list[str] = []


class _TopIssueOutput(_Lenient):
    file: str = ""
    class_name: str = ""
    method: str = ""
    issue: str = ""
    suggestion: str = ""


class _RecommendationOutput(_Lenient):
    description: str
    category: str = ""
    priority: str = ""
    impact: str = ""


class AssessmentOutput(_Lenient):
    """The JSON record the model is asked to return for each batch."""

    project_summary: _ProjectSummaryOutput
    grades: _GradesOutput
    common_problems: list[_ProblemOutput] = []
    top_issues: list[_TopIssueOutput] = []
    recommendations: list[_RecommendationOutput] = []


# =============================================================================
# CONVERSION
# =============================================================================


def parse_assessment(record: dict[str, Any]) -> BatchAssessment:
    """Validate an extracted record and convert it to a ``BatchAssessment``.

    Raises:
        SchemaError: If the record does not match the assessment schema.
    """
    try:
        output = AssessmentOutput.model_validate(record)
    except ValidationError as e:
        invalid = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise SchemaError(invalid) from e
    return to_assessment(output)


def to_assessment(output: AssessmentOutput) -> BatchAssessment:
    """Convert pydantic output to the domain ``BatchAssessment``."""
    summary = output.project_summary
    grades = output.grades
    overall_grade = grades.overall.final_grade.strip().upper()
    return BatchAssessment(
        project_summary=ProjectSummary(
            project_name=summary.project_name,
            analysis_date=summary.analysis_date,
            project_type=summary.project_type,
            total_files=summary.total_files,
            total_classes=summary.total_classes,
        ),
        grades={
            category: _to_category(category, getattr(grades, category.value))
            for category in GradeCategory
        },
        overall=OverallGrade(
            weighted_score=grades.overall.weighted_score,
            final_grade=(
                LetterGrade(overall_grade)
                if overall_grade in LetterGrade.__members__
                else LetterGrade.F
            ),
            summary=grades.overall.summary,
        ),
        common_problems=[_to_problem(p) for p in output.common_problems],
        top_issues=[
            TopIssue(
                file=i.file,
                class_name=i.class_name,
                method=i.method,
                issue=i.issue,
                suggestion=i.suggestion,
            )
            for i in output.top_issues
        ],
        recommendations=[
            Recommendation(
                description=r.description,
                category=r.category,
                priority=r.priority,
                impact=r.impact,
            )
            for r in output.recommendations
        ],
    )


def _to_category(category: GradeCategory, c: _CategoryOutput) -> CategoryGrade:
    return CategoryGrade(
        score=c.score,
        weight=category.weight,
        positive_points=list(c.positive_points),
        negative_points=list(c.negative_points),
        observations=c.observations,
    )


def _to_problem(p: _ProblemOutput) -> Problem:
    severity = _SEVERITY_MAP.get(p.severity.strip().lower())
    if severity is None:
        logger.warning("Unknown problem severity %r, defaulting to MEDIUM", p.severity)
        severity = Severity.MEDIUM
    return Problem(
        title=p.title,
        description=p.description,
        severity=severity,
        occurrences=p.occurrences or 1,
        affected_files=list(dict.fromkeys(p.affected_files)),
    )
