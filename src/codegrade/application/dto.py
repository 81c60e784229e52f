"""Application-layer command and result DTOs."""

from __future__ import annotations

from dataclasses import dataclass

from codegrade.domain.batching.value_objects import SourceItem
from codegrade.domain.grading.entities import AggregatedReport

# =============================================================================
# ANALYZE CODEBASE
# =============================================================================


@dataclass(frozen=True)
class AnalysisContext:
    """Run-wide facts every batch prompt is rendered with."""

    project_name: str
    analysis_date: str
    project_type: str


@dataclass(frozen=True)
class AnalyzeCodebaseCommand:
    """Command to grade a set of already-read source items."""

    context: AnalysisContext
    items: list[SourceItem]
    model: str


@dataclass(frozen=True)
class AnalyzeCodebaseResult:
    """Result of a codebase analysis run."""

    report: AggregatedReport
    batches_planned: int
