"""Shared builders for grading fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from codegrade.domain.batching.value_objects import SourceItem
from codegrade.domain.grading.value_objects import (
    BatchAssessment,
    BatchResult,
    CategoryGrade,
    OverallGrade,
    Problem,
    ProjectSummary,
    Recommendation,
    TopIssue,
)
from codegrade.domain.llm.value_objects import LLMUsage
from codegrade.shared.types import FilePath, GradeCategory, LetterGrade

AssessmentFactory = Callable[..., BatchAssessment]
ResultFactory = Callable[..., BatchResult]


def build_assessment(
    score: float = 7.0,
    *,
    scores: dict[GradeCategory, float] | None = None,
    project_name: str = "checkout-tests",
    summary: str = "Solid suite with gaps in error handling.",
    common_problems: list[Problem] | None = None,
    top_issues: list[TopIssue] | None = None,
    recommendations: list[Recommendation] | None = None,
    total_classes: int = 2,
) -> BatchAssessment:
    """Build an assessment where every category scores *score* by default."""
    per_category = scores or {}
    grades = {
        category: CategoryGrade(
            score=per_category.get(category, score),
            weight=category.weight,
            positive_points=[f"{category.value} strength"],
            negative_points=[f"{category.value} weakness"],
            observations=f"{category.value} notes.",
        )
        for category in GradeCategory
    }
    return BatchAssessment(
        project_summary=ProjectSummary(
            project_name=project_name,
            analysis_date="2026-10-19",
            project_type="Test Automation",
            total_files=99,
            total_classes=total_classes,
        ),
        grades=grades,
        overall=OverallGrade(
            weighted_score=score,
            final_grade=LetterGrade.B,
            summary=summary,
        ),
        common_problems=common_problems or [],
        top_issues=top_issues or [],
        recommendations=recommendations or [],
    )


def build_record(score: float = 7.0, **overrides: Any) -> dict[str, Any]:
    """Build a raw JSON-shaped record as a model would return it."""
    category = {
        "score": score,
        "weight": 0,
        "positive_points": ["Page objects are used consistently"],
        "negative_points": ["Thread.sleep in waits"],
        "observations": "Reasonable structure.",
    }
    record: dict[str, Any] = {
        "project_summary": {
            "project_name": "checkout-tests",
            "total_files": 2,
            "total_classes": 2,
            "analysis_date": "2026-10-19",
            "project_type": "Test Automation",
        },
        "grades": {
            "architecture": dict(category),
            "code_quality": dict(category),
            "validations": dict(category),
            "error_handling": dict(category),
            "overall": {
                "weighted_score": score,
                "final_grade": "B",
                "summary": "Solid suite.",
            },
        },
        "common_problems": [
            {
                "title": "Null check missing",
                "description": "Responses are dereferenced without checks.",
                "severity": "high",
                "occurrences": 2,
                "affected_files": ["LoginTest.java"],
            }
        ],
        "top_issues": [
            {
                "file": "LoginTest.java",
                "class_name": "LoginTest",
                "method": "testLogin()",
                "issue": "Hard-coded sleep",
                "suggestion": "Use an explicit wait",
            }
        ],
        "recommendations": [
            {
                "category": "validations",
                "priority": "high",
                "description": "Replace sleeps with explicit waits",
                "impact": "Less flakiness",
            }
        ],
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_assessment() -> AssessmentFactory:
    return build_assessment


@pytest.fixture
def make_result() -> ResultFactory:
    def _make(
        batch_number: int,
        score: float = 7.0,
        *,
        size: int = 1,
        usage: LLMUsage | None = None,
        **kwargs: Any,
    ) -> BatchResult:
        return BatchResult(
            batch_number=batch_number,
            assessment=build_assessment(score, **kwargs),
            actual_batch_size=size,
            usage=usage or LLMUsage(),
        )

    return _make


@pytest.fixture
def make_item() -> Callable[..., SourceItem]:
    def _make(name: str, content: str = "class A {}") -> SourceItem:
        return SourceItem(
            path=FilePath(f"src/test/java/{name}"), name=name, content=content
        )

    return _make
