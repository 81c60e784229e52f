"""Entities for the Grading bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field

from codegrade.domain.execution.value_objects import BatchFailure, ExecutionMetadata
from codegrade.domain.grading.value_objects import (
    CategoryGrade,
    OverallGrade,
    Problem,
    ProjectSummary,
    Recommendation,
    TopIssue,
)
from codegrade.domain.llm.value_objects import CostEstimate, LLMUsage
from codegrade.shared.types import GradeCategory, LetterGrade

# =============================================================================
# ENTITIES
# =============================================================================


@dataclass(frozen=True)
class AggregatedReport:
    """Aggregate root: the consolidated assessment of a whole codebase."""

    project_summary: ProjectSummary
    grades: dict[GradeCategory, CategoryGrade]
    overall: OverallGrade
    common_problems: list[Problem] = field(default_factory=list[Problem])
    top_issues: list[TopIssue] = field(default_factory=list[TopIssue])
    recommendations: list[Recommendation] = field(
        default_factory=list[Recommendation]
    )
    token_usage: LLMUsage = field(default_factory=LLMUsage)
    estimated_cost: CostEstimate | None = None
    batch_failures: list[BatchFailure] = field(default_factory=list[BatchFailure])
    execution: ExecutionMetadata | None = None

    @property
    def final_grade(self) -> LetterGrade:
        return self.overall.final_grade

    @property
    def is_partial(self) -> bool:
        """Whether some batches failed and are missing from the scores."""
        return bool(self.batch_failures)
