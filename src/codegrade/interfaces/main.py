"""Command-line entry point and composition root.

Usage::

    codegrade [TARGET_DIR]

Grades every source file under ``TARGET_DIR`` (default: the current
directory) and writes the aggregated JSON report to the configured output
file in the current directory.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from datetime import date
from pathlib import Path

from codegrade.application.analyze_codebase import AnalyzeCodebase
from codegrade.application.dto import AnalysisContext, AnalyzeCodebaseCommand
from codegrade.domain.batching.services import BatchPlanner
from codegrade.domain.batching.value_objects import BatchingConfig
from codegrade.domain.execution.services import (
    ConcurrencyLimiter,
    RetryingBatchExecutor,
)
from codegrade.domain.execution.value_objects import RetryPolicy
from codegrade.domain.grading.entities import AggregatedReport
from codegrade.domain.llm.services import CostEstimator
from codegrade.domain.llm.value_objects import ModelConfig, PricingTable
from codegrade.infrastructure.filesystem.source_reader import SourceReader
from codegrade.infrastructure.parsing.response_extractor import (
    StructuredResponseExtractor,
)
from codegrade.infrastructure.prompting.prompt_builder import RUBRIC, load_rubric
from codegrade.infrastructure.storage.debug_sink import DebugArtifactSink
from codegrade.infrastructure.storage.report_store import FileReportStore
from codegrade.interfaces.batch_analyzer import LLMBatchAnalyzer
from codegrade.interfaces.toml_config import CodegradeConfig, load_codegrade_config
from codegrade.shared.exceptions import CodegradeError, NoSourceFilesError
from codegrade.shared.types import GradeCategory, TokenCount

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Run a full codebase grading pass."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    args = sys.argv[1:] if argv is None else argv
    target_dir = Path(args[0]) if args else Path.cwd()

    try:
        config = load_codegrade_config()
        report = _execute_pipeline(config, target_dir)
    except CodegradeError as e:
        logger.error("Analysis failed: %s", e)
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)

    _log_summary(report)


def _execute_pipeline(config: CodegradeConfig, target_dir: Path) -> AggregatedReport:
    """Wire infrastructure, build use case, and execute."""
    logger.info("Analyzing codebase at: %s", target_dir.resolve())

    # 1. Read sources
    reader = SourceReader(
        max_chars=config.max_file_chars,
        extensions=config.extensions,
        excluded_dirs=config.excluded_dirs,
    )
    paths = reader.scan(target_dir)
    items = reader.read_all(paths)
    if not items:
        exts = ", ".join(config.extensions)
        msg = f"No source files ({exts}) found in {target_dir}"
        raise NoSourceFilesError(msg)
    logger.info("Found %d source file(s)", len(items))

    # 2. Construct infrastructure
    model_config = ModelConfig(
        model=config.model,
        max_tokens=TokenCount(config.max_tokens),
        temperature=config.temperature,
    )
    rubric = (
        load_rubric(config.prompt_template)
        if config.prompt_template is not None
        else RUBRIC
    )
    analyzer = LLMBatchAnalyzer(
        config=model_config,
        extractor=StructuredResponseExtractor(),
        debug_sink=DebugArtifactSink(debug_dir=Path(config.debug_dir)),
        rubric=rubric,
    )

    # 3. Build use case
    use_case = AnalyzeCodebase(
        planner=BatchPlanner(
            BatchingConfig(
                max_items_per_batch=config.max_items_per_batch,
                max_token_budget=TokenCount(config.max_input_tokens),
            )
        ),
        limiter=ConcurrencyLimiter(
            concurrency=config.parallel_batches,
            executor=RetryingBatchExecutor(
                RetryPolicy(
                    attempts=config.retry_attempts,
                    base_delay_ms=config.retry_delay_ms,
                    backoff_factor=config.retry_backoff,
                )
            ),
        ),
        analyzer=analyzer,
        cost_estimator=CostEstimator(PricingTable().with_entries(config.pricing)),
    )

    # 4. Execute
    cmd = AnalyzeCodebaseCommand(
        context=AnalysisContext(
            project_name=reader.project_name(target_dir),
            analysis_date=date.today().isoformat(),
            project_type=config.project_type,
        ),
        items=items,
        model=config.model,
    )
    result = asyncio.run(use_case.execute(cmd))

    # 5. Persist
    FileReportStore(output_path=Path.cwd() / config.output_file).save(result.report)
    return result.report


def _log_summary(report: AggregatedReport) -> None:
    summary = report.project_summary
    logger.info(
        "Project %s: %d file(s) in %d batch(es)",
        summary.project_name,
        summary.total_files,
        summary.batches_processed,
    )
    for category in GradeCategory:
        logger.info("  %s: %.1f/10", category.value, report.grades[category].score)
    logger.info(
        "Final grade: %s (%.1f/10)",
        report.final_grade,
        report.overall.weighted_score,
    )

    usage = report.token_usage
    logger.info(
        "Token usage: %d prompt + %d completion = %d total",
        usage.prompt_tokens,
        usage.completion_tokens,
        usage.total_tokens,
    )
    if report.estimated_cost is not None:
        logger.info(
            "Estimated cost (%s): $%.4f",
            report.estimated_cost.model,
            report.estimated_cost.total_cost_usd,
        )
    if report.execution is not None:
        logger.info("Duration: %s", report.execution.duration_formatted)
    if report.is_partial:
        logger.warning(
            "Partial report: %d batch(es) failed: %s",
            len(report.batch_failures),
            ", ".join(str(f.batch_number) for f in report.batch_failures),
        )


if __name__ == "__main__":
    main()
