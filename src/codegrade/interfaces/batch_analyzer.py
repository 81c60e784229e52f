"""BatchAnalyzerPort implementation using pydantic-ai."""

from __future__ import annotations

import logging

from dataclasses import dataclass

from codegrade.application.dto import AnalysisContext
from codegrade.domain.batching.value_objects import Batch
from codegrade.domain.grading.value_objects import BatchResult
from codegrade.domain.llm.value_objects import LLMUsage, ModelConfig
from codegrade.infrastructure.llm_providers.factory import create_text_agent
from codegrade.infrastructure.parsing.assessment_schema import parse_assessment
from codegrade.infrastructure.parsing.response_extractor import (
    StructuredResponseExtractor,
)
from codegrade.infrastructure.prompting.prompt_builder import (
    RUBRIC,
    SYSTEM_PROMPT,
    build_batch_prompt,
)
from codegrade.infrastructure.storage.debug_sink import DebugArtifactSink
from codegrade.shared.exceptions import ExtractionError, RemoteCallError

logger = logging.getLogger(__name__)

# =============================================================================
# ANALYZER
# =============================================================================


@dataclass
class LLMBatchAnalyzer:
    """Bridges BatchAnalyzerPort to pydantic-ai.

    One call sends one batch, extracts the JSON record from the free-text
    reply and validates it into a ``BatchResult``. Any failure is raised so
    that the caller's retry policy applies.
    """

    config: ModelConfig
    extractor: StructuredResponseExtractor
    debug_sink: DebugArtifactSink | None = None
    rubric: str = RUBRIC

    @property
    def provider(self) -> str:
        return self.config.model.split(":", 1)[0]

    async def analyze(self, batch: Batch, context: AnalysisContext) -> BatchResult:
        """Grade one batch of source items.

        Raises:
            RemoteCallError: If the provider call fails.
            ExtractionError: If no JSON record can be recovered from the reply.
            SchemaError: If the record lacks required sections.
        """
        prompt = build_batch_prompt(
            batch,
            project_name=context.project_name,
            analysis_date=context.analysis_date,
            project_type=context.project_type,
            rubric=self.rubric,
        )
        logger.debug(
            "Sending batch %d (%d files, %d prompt chars)",
            batch.number,
            len(batch),
            len(prompt),
        )

        agent = create_text_agent(self.config, SYSTEM_PROMPT)
        try:
            result = await agent.run(prompt)
        except Exception as e:
            raise RemoteCallError(self.provider, f"{type(e).__name__}: {e}") from e

        run_usage = result.usage()
        usage = LLMUsage(
            prompt_tokens=run_usage.input_tokens or 0,
            completion_tokens=run_usage.output_tokens or 0,
            requests=run_usage.requests,
        )

        raw_text = result.output
        try:
            record = self.extractor.extract(raw_text)
        except ExtractionError:
            if self.debug_sink is not None:
                self.debug_sink.save(batch.number, raw_text)
            raise

        return BatchResult(
            batch_number=batch.number,
            assessment=parse_assessment(record),
            actual_batch_size=len(batch),
            usage=usage,
        )
