"""Tests for CostEstimator and pricing value objects."""

from __future__ import annotations

import pytest

from codegrade.domain.llm.services import CostEstimator
from codegrade.domain.llm.value_objects import (
    LLMUsage,
    ModelPricing,
    PricingTable,
    Rate,
)

# =============================================================================
# Rate
# =============================================================================


class TestRate:
    def test_flat_rate(self) -> None:
        assert Rate(per_million=0.30).for_tokens(10_000_000) == 0.30

    def test_tier_applies_strictly_above_threshold(self) -> None:
        rate = Rate(per_million=1.25, threshold=200_000, above_threshold_per_million=2.5)
        assert rate.for_tokens(200_000) == 1.25
        assert rate.for_tokens(200_001) == 2.5

    def test_threshold_requires_above_rate(self) -> None:
        with pytest.raises(ValueError, match="together"):
            Rate(per_million=1.0, threshold=100)


# =============================================================================
# Pricing table
# =============================================================================


class TestPricingTable:
    def test_known_model(self) -> None:
        entry = PricingTable().lookup("google-gla:gemini-2.5-flash")
        assert entry.label == "Gemini 2.5 Flash"

    def test_unknown_model_uses_default(self) -> None:
        table = PricingTable()
        assert table.lookup("acme:mystery-model") == table.default

    def test_with_entries_overrides(self) -> None:
        custom = ModelPricing(
            label="Custom",
            input=Rate(per_million=1.0),
            output=Rate(per_million=2.0),
        )
        table = PricingTable().with_entries({"openai:o4-mini": custom})

        assert table.lookup("openai:o4-mini") == custom
        assert PricingTable().lookup("openai:o4-mini") != custom


# =============================================================================
# Estimator
# =============================================================================


class TestCostEstimator:
    def test_flat_pricing(self) -> None:
        usage = LLMUsage(prompt_tokens=1_000_000, completion_tokens=200_000)

        cost = CostEstimator().estimate(usage, "google-gla:gemini-2.5-flash")

        assert cost.input_cost_usd == pytest.approx(0.30)
        assert cost.output_cost_usd == pytest.approx(0.50)
        assert cost.total_cost_usd == pytest.approx(0.80)
        assert cost.currency == "USD"
        assert cost.model == "Gemini 2.5 Flash"

    def test_tiers_selected_independently(self) -> None:
        usage = LLMUsage(prompt_tokens=300_000, completion_tokens=100_000)

        cost = CostEstimator().estimate(usage, "google-gla:gemini-2.5-pro")

        assert cost.input_cost_usd == pytest.approx(0.75)
        assert cost.output_cost_usd == pytest.approx(1.00)

    def test_unknown_model_priced_with_fallback(self) -> None:
        usage = LLMUsage(prompt_tokens=2_000_000, completion_tokens=1_000_000)

        cost = CostEstimator().estimate(usage, "acme:mystery-model")

        assert cost.model == "GPT-4o-mini"
        assert cost.input_cost_usd == pytest.approx(0.30)
        assert cost.output_cost_usd == pytest.approx(0.60)

    def test_zero_usage_costs_nothing(self) -> None:
        cost = CostEstimator().estimate(LLMUsage(), "openai:gpt-4o-mini")
        assert cost.total_cost_usd == 0.0


class TestLLMUsage:
    def test_addition(self) -> None:
        total = LLMUsage(10, 5, 1) + LLMUsage(20, 7, 2)
        assert total == LLMUsage(prompt_tokens=30, completion_tokens=12, requests=3)
        assert total.total_tokens == 42
