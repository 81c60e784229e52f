"""Domain services for the Batching bounded context."""

from __future__ import annotations

import math

from collections.abc import Sequence
from dataclasses import dataclass, field

from codegrade.domain.batching.value_objects import Batch, BatchingConfig, SourceItem
from codegrade.shared.types import TokenCount

CHARS_PER_TOKEN = 4
"""Approximate characters per LLM token (conservative estimate)."""

# =============================================================================
# TOKEN ESTIMATION
# =============================================================================


def estimate_tokens(text: str) -> TokenCount:
    """Approximate the token cost of *text* for capacity planning only.

    Billing always uses the provider's usage counters, never this estimate.
    """
    return TokenCount(math.ceil(len(text) / CHARS_PER_TOKEN))


# =============================================================================
# PLANNER
# =============================================================================


@dataclass
class BatchPlanner:
    """Groups source items into count- and token-bounded batches."""

    config: BatchingConfig = field(default_factory=BatchingConfig)

    def plan(self, items: Sequence[SourceItem]) -> list[Batch]:
        """Split *items* into batches, preserving input order.

        A batch is closed when it is full, or when the next item would push
        it over the token budget. The budget is not checked for the first
        item of a batch, so an oversized item lands alone in its own batch
        and nothing is ever dropped.

        Args:
            items: Source items in the order they should be analyzed.

        Returns:
            Batches numbered from 1, in input order.
        """
        groups: list[list[SourceItem]] = []
        current: list[SourceItem] = []
        running = 0

        for item in items:
            cost = estimate_tokens(item.content)
            full = len(current) >= self.config.max_items_per_batch
            over_budget = (
                bool(current) and running + cost > self.config.max_token_budget
            )
            if full or over_budget:
                groups.append(current)
                current = []
                running = 0

            current.append(item)
            running += cost

        if current:
            groups.append(current)

        return [
            Batch(number=index, items=tuple(group))
            for index, group in enumerate(groups, start=1)
        ]
