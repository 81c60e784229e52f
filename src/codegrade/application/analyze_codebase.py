"""Analyze Codebase use case."""

from __future__ import annotations

import functools
import logging

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol

from codegrade.application.dto import (
    AnalysisContext,
    AnalyzeCodebaseCommand,
    AnalyzeCodebaseResult,
)
from codegrade.domain.batching.services import BatchPlanner
from codegrade.domain.batching.value_objects import Batch
from codegrade.domain.execution.services import ConcurrencyLimiter
from codegrade.domain.execution.value_objects import ExecutionMetadata
from codegrade.domain.grading.services import ResultAggregator
from codegrade.domain.grading.value_objects import BatchResult
from codegrade.domain.llm.services import CostEstimator
from codegrade.domain.llm.value_objects import LLMUsage
from codegrade.shared.exceptions import AnalysisFailedError, NoSourceFilesError

logger = logging.getLogger(__name__)

# =============================================================================
# PROTOCOLS
# =============================================================================


class BatchAnalyzerPort(Protocol):
    """Port for grading one batch of source items."""

    async def analyze(
        self, batch: Batch, context: AnalysisContext
    ) -> BatchResult: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# USE CASE
# =============================================================================


@dataclass
class AnalyzeCodebase:
    """Orchestrates a full codebase grading run.

    Steps:
    1. Plan batches under the item and token limits
    2. Analyze batches in waves, retrying each one independently
    3. Aggregate the successful batch results
    4. Price the accumulated usage
    5. Attach failures and timing to the report
    """

    planner: BatchPlanner
    limiter: ConcurrencyLimiter
    analyzer: BatchAnalyzerPort
    aggregator: ResultAggregator = field(default_factory=ResultAggregator)
    cost_estimator: CostEstimator = field(default_factory=CostEstimator)
    clock: Callable[[], datetime] = _utcnow

    async def execute(self, cmd: AnalyzeCodebaseCommand) -> AnalyzeCodebaseResult:
        """Execute the grading workflow.

        Raises:
            NoSourceFilesError: If the command carries no source items.
            AnalysisFailedError: If every batch failed.
        """
        if not cmd.items:
            msg = "No source files to analyze"
            raise NoSourceFilesError(msg)

        start_time = self.clock()

        # 1. Plan
        batches = self.planner.plan(cmd.items)
        logger.info(
            "Planned %d batch(es) for %d file(s)", len(batches), len(cmd.items)
        )

        # 2. Analyze
        submit = functools.partial(self.analyzer.analyze, context=cmd.context)
        outcome = await self.limiter.run_all(batches, submit)
        if outcome.all_failed:
            raise AnalysisFailedError(outcome.failures)
        if outcome.failures:
            logger.warning(
                "%d of %d batch(es) failed; the report covers the rest",
                len(outcome.failures),
                len(batches),
            )

        # 3. Aggregate
        report = self.aggregator.aggregate(
            outcome.successes,
            total_items=len(cmd.items),
            total_batches=len(batches),
        )

        # 4. Price
        usage = sum((r.usage for r in outcome.successes), LLMUsage())
        cost = self.cost_estimator.estimate(usage, cmd.model)

        # 5. Attach run metadata
        report = replace(
            report,
            token_usage=usage,
            estimated_cost=cost,
            batch_failures=list(outcome.failures),
            execution=ExecutionMetadata(start_time=start_time, end_time=self.clock()),
        )

        return AnalyzeCodebaseResult(report=report, batches_planned=len(batches))
