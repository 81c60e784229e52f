"""Domain services for the LLM bounded context.

The remote call itself goes through a pydantic-ai ``Agent`` built by the
infrastructure layer; the domain only prices what the provider reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from codegrade.domain.llm.value_objects import CostEstimate, LLMUsage, PricingTable

TOKENS_PER_MILLION = 1_000_000

# =============================================================================
# COST ESTIMATOR
# =============================================================================


@dataclass
class CostEstimator:
    """Converts provider usage counters into a USD estimate."""

    pricing: PricingTable = field(default_factory=PricingTable)

    def estimate(self, usage: LLMUsage, model: str) -> CostEstimate:
        """Price *usage* for *model*.

        Unknown models are priced with the table's default entry. The input
        and output brackets are selected independently, each by its own
        token count.
        """
        entry = self.pricing.lookup(model)
        input_rate = entry.input.for_tokens(usage.prompt_tokens)
        output_rate = entry.output.for_tokens(usage.completion_tokens)
        return CostEstimate(
            model=entry.label,
            input_cost_usd=usage.prompt_tokens / TOKENS_PER_MILLION * input_rate,
            output_cost_usd=usage.completion_tokens
            / TOKENS_PER_MILLION
            * output_rate,
        )
