"""Typed exception hierarchy for codegrade."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codegrade.shared.types import FilePath

if TYPE_CHECKING:
    from codegrade.domain.execution.value_objects import BatchFailure

# =============================================================================
# BASE
# =============================================================================


class CodegradeError(Exception):
    """Base exception for all codegrade errors."""


# =============================================================================
# SOURCE READING
# =============================================================================


class SourceReadError(CodegradeError):
    """Failed to read a source file."""

    def __init__(self, path: FilePath, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to read {path}: {reason}")


class NoSourceFilesError(CodegradeError):
    """No readable source files were found to analyze."""


# =============================================================================
# REMOTE CALL
# =============================================================================


class RemoteCallError(CodegradeError):
    """The LLM provider call failed (network, non-2xx, rate limit)."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        super().__init__(f"Provider '{provider}' error: {reason}")


# =============================================================================
# STRUCTURED RESPONSE
# =============================================================================


class ExtractionError(CodegradeError):
    """No parseable JSON record could be recovered from a response."""

    def __init__(self, reason: str, raw_text: str = "") -> None:
        self.reason = reason
        self.raw_text = raw_text
        super().__init__(f"Failed to parse JSON response: {reason}")


class SchemaError(CodegradeError):
    """A parsed record is missing required sections."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Parsed JSON missing required fields: {', '.join(missing)}"
        )


# =============================================================================
# AGGREGATION
# =============================================================================


class NoValidBaseError(CodegradeError):
    """No batch result is available to build the aggregated report from."""


class AnalysisFailedError(CodegradeError):
    """Every batch failed; there is nothing to aggregate."""

    def __init__(self, failures: list[BatchFailure]) -> None:
        self.failures = failures
        super().__init__(f"All {len(failures)} batch(es) failed to analyze")


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigurationError(CodegradeError):
    """Invalid or missing configuration."""
