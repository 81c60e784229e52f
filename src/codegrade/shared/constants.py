"""Centralized defaults for codegrade. Overridable via configuration."""

from __future__ import annotations

# =============================================================================
# MODEL
# =============================================================================

DEFAULT_MODEL = "openai:gpt-4o-mini"
DEFAULT_MAX_COMPLETION_TOKENS = 16_000
DEFAULT_TEMPERATURE = 0.0

# =============================================================================
# SOURCE READING
# =============================================================================

MAX_FILE_CHARS = 100_000
TRUNCATION_MARKER = "\n\n... [File truncated due to size]"
DEFAULT_EXTENSIONS = (".java",)
DEFAULT_EXCLUDED_DIRS = ("node_modules", ".git", "target", "build", "dist")
DEFAULT_PROJECT_TYPE = "Test Automation"

# =============================================================================
# BATCHING
# =============================================================================

DEFAULT_MAX_ITEMS_PER_BATCH = 15
DEFAULT_MAX_INPUT_TOKENS = 120_000

# =============================================================================
# RETRY / CONCURRENCY
# =============================================================================

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1_000
DEFAULT_RETRY_BACKOFF = 2.0
DEFAULT_PARALLEL_BATCHES = 3

# =============================================================================
# AGGREGATION
# =============================================================================

MAX_TOP_ISSUES = 20

# =============================================================================
# OUTPUT
# =============================================================================

DEFAULT_OUTPUT_FILE = "analysis-results.json"
DEFAULT_DEBUG_DIR = "."
