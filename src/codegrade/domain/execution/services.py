"""Domain services for the Execution bounded context."""

from __future__ import annotations

import asyncio
import functools
import logging

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from codegrade.domain.batching.value_objects import Batch
from codegrade.domain.execution.value_objects import (
    BatchFailure,
    BatchRunOutcome,
    RetryPolicy,
)
from codegrade.domain.grading.value_objects import BatchResult
from codegrade.shared.constants import DEFAULT_PARALLEL_BATCHES

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]
SubmitFn = Callable[[Batch], Awaitable[BatchResult]]

# =============================================================================
# RETRYING EXECUTOR
# =============================================================================


@dataclass
class RetryingBatchExecutor:
    """Runs one batch submission with bounded attempts and backoff.

    Every failure kind is retried the same way. The executor reports only by
    returning or raising; logging is left to the caller.
    """

    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: SleepFn = asyncio.sleep

    async def execute(self, submit: Callable[[], Awaitable[T]]) -> T:
        """Invoke *submit* until it succeeds or attempts run out.

        Raises:
            Exception: The error from the final attempt.
        """
        for attempt in range(1, self.policy.attempts):
            try:
                return await submit()
            except Exception:
                await self.sleep(self.policy.delay_after(attempt))

        # Final attempt: its error propagates unchanged.
        return await submit()


# =============================================================================
# CONCURRENCY LIMITER
# =============================================================================


@dataclass
class ConcurrencyLimiter:
    """Dispatches batches in fixed-size waves and collects every outcome.

    A wave settles completely before the next one starts. A failing batch
    never cancels its siblings or later waves.
    """

    concurrency: int = DEFAULT_PARALLEL_BATCHES
    executor: RetryingBatchExecutor = field(default_factory=RetryingBatchExecutor)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            msg = f"concurrency must be at least 1, got {self.concurrency}"
            raise ValueError(msg)

    async def run_all(
        self, batches: Sequence[Batch], submit: SubmitFn
    ) -> BatchRunOutcome:
        """Run *submit* for every batch, ``concurrency`` at a time.

        Per-batch errors are captured as ``BatchFailure`` entries. Only
        non-``Exception`` signals such as cancellation propagate.
        """
        successes: list[BatchResult] = []
        failures: list[BatchFailure] = []
        total = len(batches)

        for start in range(0, total, self.concurrency):
            wave = batches[start : start + self.concurrency]
            logger.info(
                "Processing batches %d-%d of %d in parallel",
                wave[0].number,
                wave[-1].number,
                total,
            )
            settled = await asyncio.gather(
                *(
                    self.executor.execute(functools.partial(submit, batch))
                    for batch in wave
                ),
                return_exceptions=True,
            )

            for batch, outcome in zip(wave, settled, strict=True):
                if isinstance(outcome, Exception):
                    failures.append(
                        BatchFailure(
                            batch_number=batch.number,
                            error=outcome,
                            item_names=batch.item_names,
                        )
                    )
                    logger.error(
                        "Batch %d/%d failed: %s (files: %s)",
                        batch.number,
                        total,
                        outcome,
                        ", ".join(batch.item_names),
                    )
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    successes.append(outcome)
                    logger.info("Batch %d/%d complete", batch.number, total)

        return BatchRunOutcome(successes=successes, failures=failures)
