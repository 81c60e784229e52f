"""Value objects for the Grading bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field

from codegrade.domain.llm.value_objects import LLMUsage
from codegrade.shared.types import GradeCategory, LetterGrade, Severity

# =============================================================================
# GRADES
# =============================================================================


@dataclass(frozen=True)
class CategoryGrade:
    """Score and findings for one quality category."""

    score: float
    weight: int
    positive_points: list[str] = field(default_factory=list[str])
    negative_points: list[str] = field(default_factory=list[str])
    observations: str = ""


@dataclass(frozen=True)
class OverallGrade:
    """Weighted score across categories and its letter grade."""

    weighted_score: float
    final_grade: LetterGrade
    summary: str = ""


# =============================================================================
# FINDINGS
# =============================================================================


@dataclass(frozen=True)
class Problem:
    """A recurring problem; ``title`` is its identity."""

    title: str
    description: str
    severity: Severity
    occurrences: int
    affected_files: list[str] = field(default_factory=list[str])


@dataclass(frozen=True)
class TopIssue:
    """A specific issue pinned to a file, class and method."""

    file: str
    class_name: str
    method: str
    issue: str
    suggestion: str


@dataclass(frozen=True)
class Recommendation:
    """An improvement suggestion; ``description`` is its identity."""

    description: str
    category: str
    priority: str
    impact: str


# =============================================================================
# SUMMARY
# =============================================================================


@dataclass(frozen=True)
class ProjectSummary:
    """Descriptive header of an assessment.

    ``total_classes`` is self-reported by the model and only best-effort.
    """

    project_name: str
    analysis_date: str
    project_type: str
    total_files: int = 0
    total_classes: int = 0
    batches_processed: int = 1


# =============================================================================
# PER-BATCH RESULT
# =============================================================================


@dataclass(frozen=True)
class BatchAssessment:
    """The schema-checked assessment returned for one batch."""

    project_summary: ProjectSummary
    grades: dict[GradeCategory, CategoryGrade]
    overall: OverallGrade
    common_problems: list[Problem] = field(default_factory=list[Problem])
    top_issues: list[TopIssue] = field(default_factory=list[TopIssue])
    recommendations: list[Recommendation] = field(
        default_factory=list[Recommendation]
    )


@dataclass(frozen=True)
class BatchResult:
    """A batch assessment plus batch-local bookkeeping.

    ``actual_batch_size`` is the true item count of the batch, independent of
    any file count the model reports about itself.
    """

    batch_number: int
    assessment: BatchAssessment
    actual_batch_size: int
    usage: LLMUsage = field(default_factory=LLMUsage)
