"""TOML-based configuration loader.

Reads ``[tool.codegrade]`` from ``pyproject.toml`` and produces a typed
``CodegradeConfig`` dataclass.  Missing file or missing section → all
defaults apply (the analyzed codebase is usually not a Python project).
"""

from __future__ import annotations

import logging
import os
import tomllib

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from codegrade.domain.llm.value_objects import ModelPricing, Rate
from codegrade.shared.constants import (
    DEFAULT_DEBUG_DIR,
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_EXTENSIONS,
    DEFAULT_MAX_COMPLETION_TOKENS,
    DEFAULT_MAX_INPUT_TOKENS,
    DEFAULT_MAX_ITEMS_PER_BATCH,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_PARALLEL_BATCHES,
    DEFAULT_PROJECT_TYPE,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_TEMPERATURE,
    MAX_FILE_CHARS,
)
from codegrade.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MODEL_ENV_VAR = "CODEGRADE_MODEL"

# ── defaults ────────────────────────────────────────────────────────────
_DEFAULTS: dict[str, Any] = {
    "model": DEFAULT_MODEL,
    "max_tokens": DEFAULT_MAX_COMPLETION_TOKENS,
    "temperature": DEFAULT_TEMPERATURE,
    "max_file_chars": MAX_FILE_CHARS,
    "max_items_per_batch": DEFAULT_MAX_ITEMS_PER_BATCH,
    "max_input_tokens": DEFAULT_MAX_INPUT_TOKENS,
    "retry_attempts": DEFAULT_RETRY_ATTEMPTS,
    "retry_delay_ms": DEFAULT_RETRY_DELAY_MS,
    "retry_backoff": DEFAULT_RETRY_BACKOFF,
    "parallel_batches": DEFAULT_PARALLEL_BATCHES,
    "extensions": list(DEFAULT_EXTENSIONS),
    "excluded_dirs": list(DEFAULT_EXCLUDED_DIRS),
    "output_file": DEFAULT_OUTPUT_FILE,
    "debug_dir": DEFAULT_DEBUG_DIR,
    "project_type": DEFAULT_PROJECT_TYPE,
    "prompt_template": None,
}

_ALL_KNOWN_KEYS = {*_DEFAULTS, "pricing"}

_PRICING_KEYS = {
    "label",
    "input_per_million",
    "output_per_million",
    "threshold",
    "input_above_threshold_per_million",
    "output_above_threshold_per_million",
}

# Keys that must be integers >= 1.
_POSITIVE_INT_KEYS = (
    "max_tokens",
    "max_file_chars",
    "max_items_per_batch",
    "max_input_tokens",
    "retry_attempts",
    "parallel_batches",
)


@dataclass(frozen=True)
class CodegradeConfig:
    """Typed configuration produced by the TOML loader."""

    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_COMPLETION_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    max_file_chars: int = MAX_FILE_CHARS
    max_items_per_batch: int = DEFAULT_MAX_ITEMS_PER_BATCH
    max_input_tokens: int = DEFAULT_MAX_INPUT_TOKENS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    parallel_batches: int = DEFAULT_PARALLEL_BATCHES
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    excluded_dirs: tuple[str, ...] = DEFAULT_EXCLUDED_DIRS
    output_file: str = DEFAULT_OUTPUT_FILE
    debug_dir: str = DEFAULT_DEBUG_DIR
    project_type: str = DEFAULT_PROJECT_TYPE
    prompt_template: Path | None = None
    pricing: dict[str, ModelPricing] = field(default_factory=dict[str, ModelPricing])


def load_codegrade_config(project_root: Path | None = None) -> CodegradeConfig:
    """Load codegrade configuration from ``pyproject.toml``.

    Merge order (later wins):
        defaults → ``[tool.codegrade]`` → ``CODEGRADE_MODEL`` environment variable.
    ``[tool.codegrade.pricing."<model>"]`` tables add to the built-in price list.

    Args:
        project_root: Directory containing ``pyproject.toml``.
            Defaults to ``Path.cwd()``.

    Returns:
        A frozen ``CodegradeConfig`` dataclass.

    Raises:
        ConfigurationError: On TOML parse errors or invalid values.
    """
    if project_root is None:
        project_root = Path.cwd()

    toml_path = project_root / "pyproject.toml"

    # 1. Start with defaults.
    merged: dict[str, Any] = dict(_DEFAULTS)
    pricing: dict[str, ModelPricing] = {}

    # 2. Read TOML and overlay.
    tool_section = _read_tool_section(toml_path)
    if tool_section is not None:
        _warn_unknown_keys(tool_section)
        for key, value in tool_section.items():
            if key == "pricing":
                pricing = _parse_pricing(value)
            elif key in _DEFAULTS:
                merged[key] = value

    # 3. Environment override.
    env_model = os.environ.get(MODEL_ENV_VAR, "").strip()
    if env_model:
        merged["model"] = env_model

    # 4. Post-process and validate.
    merged["extensions"] = _normalize_extensions(merged["extensions"])
    _validate_ranges(merged)

    return CodegradeConfig(
        model=str(merged["model"]),
        max_tokens=int(merged["max_tokens"]),
        temperature=float(merged["temperature"]),
        max_file_chars=int(merged["max_file_chars"]),
        max_items_per_batch=int(merged["max_items_per_batch"]),
        max_input_tokens=int(merged["max_input_tokens"]),
        retry_attempts=int(merged["retry_attempts"]),
        retry_delay_ms=int(merged["retry_delay_ms"]),
        retry_backoff=float(merged["retry_backoff"]),
        parallel_batches=int(merged["parallel_batches"]),
        extensions=tuple(merged["extensions"]),
        excluded_dirs=tuple(str(d) for d in merged["excluded_dirs"]),
        output_file=str(merged["output_file"]),
        debug_dir=str(merged["debug_dir"]),
        project_type=str(merged["project_type"]),
        prompt_template=_resolve_template(merged["prompt_template"], project_root),
        pricing=pricing,
    )


# ── internal helpers ────────────────────────────────────────────────────


def _read_tool_section(toml_path: Path) -> dict[str, Any] | None:
    """Read ``[tool.codegrade]`` from *toml_path*, or ``None`` if absent."""
    if not toml_path.is_file():
        return None
    try:
        with toml_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {toml_path}: {exc}"
        raise ConfigurationError(msg) from exc
    tool: dict[str, Any] | None = data.get("tool")
    if not isinstance(tool, dict):
        return None
    codegrade: dict[str, Any] | None = tool.get("codegrade")
    if not isinstance(codegrade, dict):
        return None
    return codegrade


def _warn_unknown_keys(section: dict[str, Any]) -> None:
    """Log a warning for any keys not in the known set."""
    for top_key in section:
        if top_key not in _ALL_KNOWN_KEYS:
            logger.warning("Unknown key in [tool.codegrade]: %r", top_key)
    pricing: Any = section.get("pricing")
    if isinstance(pricing, dict):
        for model, entry in cast(dict[str, Any], pricing).items():
            if not isinstance(entry, dict):
                continue
            for sub_key in cast(dict[str, Any], entry):
                if sub_key not in _PRICING_KEYS:
                    logger.warning(
                        "Unknown key in [tool.codegrade.pricing.%r]: %r",
                        model,
                        sub_key,
                    )


def _parse_pricing(raw: Any) -> dict[str, ModelPricing]:
    """Convert ``[tool.codegrade.pricing]`` tables into ``ModelPricing``."""
    if not isinstance(raw, dict):
        msg = "[tool.codegrade.pricing] must be a table of model entries"
        raise ConfigurationError(msg)

    entries: dict[str, ModelPricing] = {}
    for model, value in cast(dict[str, Any], raw).items():
        if not isinstance(value, dict):
            msg = f"Pricing for {model!r} must be a table"
            raise ConfigurationError(msg)
        entry = cast(dict[str, Any], value)
        try:
            input_price = float(entry["input_per_million"])
            output_price = float(entry["output_per_million"])
        except KeyError as exc:
            msg = f"Pricing for {model!r} is missing {exc.args[0]!r}"
            raise ConfigurationError(msg) from None

        threshold = entry.get("threshold")
        try:
            entries[model] = ModelPricing(
                label=str(entry.get("label", model)),
                input=Rate(
                    per_million=input_price,
                    threshold=threshold,
                    above_threshold_per_million=entry.get(
                        "input_above_threshold_per_million"
                    ),
                ),
                output=Rate(
                    per_million=output_price,
                    threshold=threshold,
                    above_threshold_per_million=entry.get(
                        "output_above_threshold_per_million"
                    ),
                ),
            )
        except ValueError as exc:
            msg = f"Invalid pricing for {model!r}: {exc}"
            raise ConfigurationError(msg) from exc
    return entries


def _normalize_extensions(raw: Any) -> list[str]:
    """Ensure every extension starts with ``'.'``."""
    if not isinstance(raw, list):
        return list(DEFAULT_EXTENSIONS)
    items = cast(list[str], raw)
    result: list[str] = []
    for item in items:
        ext = item.strip()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = f".{ext}"
        result.append(ext)
    return result


def _validate_ranges(merged: dict[str, Any]) -> None:
    """Validate numeric ranges."""
    for key in _POSITIVE_INT_KEYS:
        value = int(merged[key])
        if value < 1:
            msg = f"{key} must be at least 1, got {value}"
            raise ConfigurationError(msg)

    temp = float(merged["temperature"])
    if not 0.0 <= temp <= 2.0:
        msg = f"temperature must be between 0.0 and 2.0, got {temp}"
        raise ConfigurationError(msg)

    delay = int(merged["retry_delay_ms"])
    if delay < 0:
        msg = f"retry_delay_ms must not be negative, got {delay}"
        raise ConfigurationError(msg)

    backoff = float(merged["retry_backoff"])
    if backoff < 1.0:
        msg = f"retry_backoff must be at least 1.0, got {backoff}"
        raise ConfigurationError(msg)


def _resolve_template(raw: Any, project_root: Path) -> Path | None:
    """Resolve ``prompt_template`` against the directory holding ``pyproject.toml``."""
    if raw is None:
        return None
    if not isinstance(raw, str) or not raw.strip():
        msg = f"prompt_template must be a non-empty path string, got {raw!r}"
        raise ConfigurationError(msg)
    path = Path(raw).expanduser()
    return path if path.is_absolute() else project_root / path
