"""Value objects for the LLM bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field

from codegrade.shared.types import TokenCount

# =============================================================================
# USAGE
# =============================================================================


@dataclass(frozen=True)
class LLMUsage:
    """Token usage reported by the provider. Authoritative for billing."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    requests: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def __add__(self, other: LLMUsage) -> LLMUsage:
        return LLMUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            requests=self.requests + other.requests,
        )


@dataclass(frozen=True)
class ModelConfig:
    """Configuration for an LLM model via pydantic-ai.

    The ``model`` field uses pydantic-ai model strings, e.g.
    ``"openai:gpt-4o-mini"`` or ``"google-gla:gemini-2.5-flash"``.
    """

    model: str
    max_tokens: TokenCount
    temperature: float = 0.0


# =============================================================================
# PRICING
# =============================================================================


@dataclass(frozen=True)
class Rate:
    """USD cost per million tokens, optionally tiered by a token threshold.

    Token counts at or below ``threshold`` use ``per_million``; counts above
    it use ``above_threshold_per_million``.
    """

    per_million: float
    threshold: int | None = None
    above_threshold_per_million: float | None = None

    def __post_init__(self) -> None:
        if (self.threshold is None) != (self.above_threshold_per_million is None):
            msg = "threshold and above_threshold_per_million must be set together"
            raise ValueError(msg)

    def for_tokens(self, tokens: int) -> float:
        """Select the per-million rate that applies to *tokens*."""
        if (
            self.threshold is not None
            and self.above_threshold_per_million is not None
            and tokens > self.threshold
        ):
            return self.above_threshold_per_million
        return self.per_million


@dataclass(frozen=True)
class ModelPricing:
    """Input and output rates for one model."""

    label: str
    input: Rate
    output: Rate


_FALLBACK_PRICING = ModelPricing(
    label="GPT-4o-mini",
    input=Rate(per_million=0.15),
    output=Rate(per_million=0.60),
)


def _default_entries() -> dict[str, ModelPricing]:
    return {
        "openai:gpt-4o-mini": _FALLBACK_PRICING,
        "azure:gpt-4o-mini": ModelPricing(
            label="GPT-4o-mini (Azure)",
            input=Rate(per_million=0.15),
            output=Rate(per_million=0.60),
        ),
        "openai:o4-mini": ModelPricing(
            label="o4-mini",
            input=Rate(per_million=1.10),
            output=Rate(per_million=4.40),
        ),
        "google-gla:gemini-2.5-flash": ModelPricing(
            label="Gemini 2.5 Flash",
            input=Rate(per_million=0.30),
            output=Rate(per_million=2.50),
        ),
        "google-gla:gemini-2.5-pro": ModelPricing(
            label="Gemini 2.5 Pro",
            input=Rate(
                per_million=1.25,
                threshold=200_000,
                above_threshold_per_million=2.50,
            ),
            output=Rate(
                per_million=10.00,
                threshold=200_000,
                above_threshold_per_million=15.00,
            ),
        ),
    }


@dataclass(frozen=True)
class PricingTable:
    """Model name to pricing lookup with a default entry for unknown models."""

    entries: dict[str, ModelPricing] = field(default_factory=_default_entries)
    default: ModelPricing = _FALLBACK_PRICING

    def lookup(self, model: str) -> ModelPricing:
        return self.entries.get(model, self.default)

    def with_entries(self, extra: dict[str, ModelPricing]) -> PricingTable:
        """Return a new table where *extra* overrides existing entries."""
        return PricingTable(entries={**self.entries, **extra}, default=self.default)


@dataclass(frozen=True)
class CostEstimate:
    """Monetary estimate for a run's accumulated usage."""

    model: str
    input_cost_usd: float
    output_cost_usd: float
    currency: str = "USD"

    @property
    def total_cost_usd(self) -> float:
        return self.input_cost_usd + self.output_cost_usd
