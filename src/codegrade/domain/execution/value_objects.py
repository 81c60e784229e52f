"""Value objects for the Execution bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from codegrade.domain.grading.value_objects import BatchResult
from codegrade.shared.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_RETRY_DELAY_MS,
)

# =============================================================================
# RETRY POLICY
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded attempts with exponential backoff between them."""

    attempts: int = DEFAULT_RETRY_ATTEMPTS
    base_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    backoff_factor: float = DEFAULT_RETRY_BACKOFF

    def __post_init__(self) -> None:
        if self.attempts < 1:
            msg = f"attempts must be at least 1, got {self.attempts}"
            raise ValueError(msg)
        if self.base_delay_ms < 0:
            msg = f"base_delay_ms must not be negative, got {self.base_delay_ms}"
            raise ValueError(msg)

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after failed *attempt* (1-based)."""
        return self.base_delay_ms * self.backoff_factor ** (attempt - 1) / 1000


# =============================================================================
# OUTCOMES
# =============================================================================


@dataclass(frozen=True)
class BatchFailure:
    """A batch that exhausted its retries."""

    batch_number: int
    error: Exception
    item_names: list[str] = field(default_factory=list[str])

    @property
    def reason(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True)
class BatchRunOutcome:
    """Per-batch successes and failures collected across all waves."""

    successes: list[BatchResult] = field(default_factory=list[BatchResult])
    failures: list[BatchFailure] = field(default_factory=list[BatchFailure])

    @property
    def all_failed(self) -> bool:
        return not self.successes


@dataclass(frozen=True)
class ExecutionMetadata:
    """Wall-clock timing of one analysis run."""

    start_time: datetime
    end_time: datetime

    @property
    def duration_seconds(self) -> float:
        return round((self.end_time - self.start_time).total_seconds(), 2)

    @property
    def duration_formatted(self) -> str:
        total = int(self.duration_seconds)
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"
