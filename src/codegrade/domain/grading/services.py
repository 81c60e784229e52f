"""Domain services for the Grading bounded context."""

from __future__ import annotations

import logging
import math

from collections.abc import Sequence
from dataclasses import dataclass, replace

from codegrade.domain.grading.entities import AggregatedReport
from codegrade.domain.grading.value_objects import (
    BatchResult,
    CategoryGrade,
    OverallGrade,
    Problem,
    Recommendation,
    TopIssue,
)
from codegrade.shared.constants import MAX_TOP_ISSUES
from codegrade.shared.exceptions import NoValidBaseError
from codegrade.shared.types import GradeCategory, LetterGrade

logger = logging.getLogger(__name__)

_GRADE_STEPS: tuple[tuple[float, LetterGrade], ...] = (
    (9.0, LetterGrade.A),
    (7.0, LetterGrade.B),
    (5.0, LetterGrade.C),
    (3.0, LetterGrade.D),
)

# =============================================================================
# SCORING HELPERS
# =============================================================================


def round_one_decimal(value: float) -> float:
    """Round half away from zero to one decimal place."""
    return math.copysign(math.floor(abs(value) * 10 + 0.5) / 10, value)


def letter_grade_for(weighted_score: float) -> LetterGrade:
    """Map a weighted score to its letter grade."""
    for floor, grade in _GRADE_STEPS:
        if weighted_score >= floor:
            return grade
    return LetterGrade.F


def weighted_overall(grades: dict[GradeCategory, CategoryGrade]) -> float:
    """Combine category scores using the fixed category weights."""
    total = sum(grades[c].score * c.weight / 100 for c in GradeCategory)
    return round_one_decimal(total)


def _ordered_union(groups: Sequence[Sequence[str]]) -> list[str]:
    seen: dict[str, None] = {}
    for group in groups:
        for value in group:
            seen.setdefault(value, None)
    return list(seen)


# =============================================================================
# AGGREGATOR
# =============================================================================


@dataclass
class ResultAggregator:
    """Merges per-batch assessments into one report.

    Scores are weighted by each batch's true item count, so the result does
    not depend on which batch finished first.
    """

    max_top_issues: int = MAX_TOP_ISSUES

    def aggregate(
        self,
        results: Sequence[BatchResult],
        total_items: int,
        total_batches: int,
    ) -> AggregatedReport:
        """Build the consolidated report from successful batch results.

        Args:
            results: Successful batch results, in batch order.
            total_items: Number of source items that were planned.
            total_batches: Number of batches that were planned.

        Returns:
            A report with recomputed scores and merged findings. Usage, cost
            and failure metadata are attached by the caller.

        Raises:
            NoValidBaseError: If there are no results to aggregate.
        """
        if not results:
            msg = "No valid batch results found - nothing to aggregate"
            raise NoValidBaseError(msg)

        ordered = sorted(results, key=lambda r: r.batch_number)
        base = ordered[0].assessment

        summary = replace(
            base.project_summary,
            total_files=total_items,
            total_classes=sum(
                r.assessment.project_summary.total_classes for r in ordered
            ),
            batches_processed=total_batches,
        )

        grades = {
            category: self._merge_category(category, ordered)
            for category in GradeCategory
        }
        weighted = weighted_overall(grades)
        overall = OverallGrade(
            weighted_score=weighted,
            final_grade=letter_grade_for(weighted),
            summary=base.overall.summary,
        )

        logger.info(
            "Aggregated %d batch result(s): weighted score %.1f (%s)",
            len(ordered),
            overall.weighted_score,
            overall.final_grade,
        )

        return AggregatedReport(
            project_summary=summary,
            grades=grades,
            overall=overall,
            common_problems=self._merge_problems(ordered),
            top_issues=self._collect_top_issues(ordered),
            recommendations=self._merge_recommendations(ordered),
        )

    def _merge_category(
        self, category: GradeCategory, results: Sequence[BatchResult]
    ) -> CategoryGrade:
        weighted_sum = 0.0
        total_weight = 0
        for result in results:
            size = result.actual_batch_size or 1
            weighted_sum += result.assessment.grades[category].score * size
            total_weight += size

        category_grades = [r.assessment.grades[category] for r in results]
        return CategoryGrade(
            score=round_one_decimal(weighted_sum / total_weight),
            weight=category.weight,
            positive_points=_ordered_union(
                [g.positive_points for g in category_grades]
            ),
            negative_points=_ordered_union(
                [g.negative_points for g in category_grades]
            ),
            observations=" ".join(
                g.observations for g in category_grades if g.observations
            ),
        )

    def _merge_problems(self, results: Sequence[BatchResult]) -> list[Problem]:
        """Group problems by title, summing occurrences and files."""
        merged: dict[str, Problem] = {}
        for result in results:
            for problem in result.assessment.common_problems:
                existing = merged.get(problem.title)
                if existing is None:
                    merged[problem.title] = problem
                    continue
                merged[problem.title] = replace(
                    existing,
                    occurrences=existing.occurrences + problem.occurrences,
                    affected_files=_ordered_union(
                        [existing.affected_files, problem.affected_files]
                    ),
                )
        return sorted(merged.values(), key=lambda p: p.occurrences, reverse=True)

    def _collect_top_issues(self, results: Sequence[BatchResult]) -> list[TopIssue]:
        issues: list[TopIssue] = []
        for result in results:
            issues.extend(result.assessment.top_issues)
        return issues[: self.max_top_issues]

    def _merge_recommendations(
        self, results: Sequence[BatchResult]
    ) -> list[Recommendation]:
        """Keep the first recommendation seen for each description."""
        merged: dict[str, Recommendation] = {}
        for result in results:
            for rec in result.assessment.recommendations:
                merged.setdefault(rec.description, rec)
        return list(merged.values())
