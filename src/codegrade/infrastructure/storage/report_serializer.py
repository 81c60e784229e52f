"""AggregatedReport JSON serialization."""

from __future__ import annotations

import json

from codegrade.domain.execution.value_objects import BatchFailure, ExecutionMetadata
from codegrade.domain.grading.entities import AggregatedReport
from codegrade.domain.grading.value_objects import (
    CategoryGrade,
    Problem,
    ProjectSummary,
    Recommendation,
    TopIssue,
)
from codegrade.domain.llm.value_objects import CostEstimate, LLMUsage
from codegrade.shared.types import GradeCategory

# =============================================================================
# SERIALIZE
# =============================================================================


def serialize(report: AggregatedReport) -> str:
    """Serialize an AggregatedReport to a pretty-printed JSON string."""
    return json.dumps(to_dict(report), indent=2, ensure_ascii=False)


def to_dict(report: AggregatedReport) -> dict[str, object]:
    """Convert a report into the nested document consumers read."""
    grades: dict[str, object] = {
        category.value: _serialize_category(report.grades[category])
        for category in GradeCategory
    }
    grades["overall"] = {
        "weighted_score": report.overall.weighted_score,
        "final_grade": report.overall.final_grade.value,
        "summary": report.overall.summary,
    }

    data: dict[str, object] = {
        "project_summary": _serialize_summary(report.project_summary),
        "grades": grades,
        "common_problems": [_serialize_problem(p) for p in report.common_problems],
        "top_issues": [_serialize_issue(i) for i in report.top_issues],
        "recommendations": [
            _serialize_recommendation(r) for r in report.recommendations
        ],
        "token_usage": _serialize_usage(report.token_usage),
    }
    if report.estimated_cost is not None:
        data["estimated_cost"] = _serialize_cost(report.estimated_cost)
    if report.batch_failures:
        data["batch_failures"] = [_serialize_failure(f) for f in report.batch_failures]
    if report.execution is not None:
        data["execution_metadata"] = _serialize_execution(report.execution)
    return data


def _serialize_summary(summary: ProjectSummary) -> dict[str, object]:
    return {
        "project_name": summary.project_name,
        "total_files": summary.total_files,
        "total_classes": summary.total_classes,
        "analysis_date": summary.analysis_date,
        "project_type": summary.project_type,
        "batches_processed": summary.batches_processed,
    }


def _serialize_category(grade: CategoryGrade) -> dict[str, object]:
    return {
        "score": grade.score,
        "weight": grade.weight,
        "positive_points": list(grade.positive_points),
        "negative_points": list(grade.negative_points),
        "observations": grade.observations,
    }


def _serialize_problem(problem: Problem) -> dict[str, object]:
    return {
        "title": problem.title,
        "description": problem.description,
        "severity": problem.severity.value,
        "occurrences": problem.occurrences,
        "affected_files": list(problem.affected_files),
    }


def _serialize_issue(issue: TopIssue) -> dict[str, str]:
    return {
        "file": issue.file,
        "class_name": issue.class_name,
        "method": issue.method,
        "issue": issue.issue,
        "suggestion": issue.suggestion,
    }


def _serialize_recommendation(rec: Recommendation) -> dict[str, str]:
    return {
        "category": rec.category,
        "priority": rec.priority,
        "description": rec.description,
        "impact": rec.impact,
    }


def _serialize_usage(usage: LLMUsage) -> dict[str, int]:
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


def _serialize_cost(cost: CostEstimate) -> dict[str, object]:
    return {
        "model": cost.model,
        "input_cost_usd": cost.input_cost_usd,
        "output_cost_usd": cost.output_cost_usd,
        "total_cost_usd": cost.total_cost_usd,
        "currency": cost.currency,
    }


def _serialize_failure(failure: BatchFailure) -> dict[str, object]:
    return {
        "batch_number": failure.batch_number,
        "error": failure.reason,
        "files": list(failure.item_names),
    }


def _serialize_execution(meta: ExecutionMetadata) -> dict[str, object]:
    return {
        "start_time": meta.start_time.isoformat(),
        "end_time": meta.end_time.isoformat(),
        "duration_seconds": meta.duration_seconds,
        "duration_formatted": meta.duration_formatted,
    }
