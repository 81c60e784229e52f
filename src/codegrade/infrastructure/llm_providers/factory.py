"""pydantic-ai Agent factory.

Creates pydantic-ai ``Agent`` instances from domain ``ModelConfig``.
"""

from __future__ import annotations

from pydantic_ai import Agent

from codegrade.domain.llm.value_objects import ModelConfig


def create_text_agent(config: ModelConfig, system_prompt: str) -> Agent[None, str]:
    """Build a pydantic-ai Agent that returns the model's raw text.

    The response is parsed by ``StructuredResponseExtractor`` rather than by
    tool calling, so the agent's own output retries are disabled and retry
    is left to ``RetryingBatchExecutor``.

    Args:
        config: Model configuration (model string, max_tokens, temperature).
        system_prompt: System prompt for the agent.

    Returns:
        A configured pydantic-ai Agent ready for ``run``.
    """
    return Agent(
        model=config.model,
        output_type=str,
        system_prompt=system_prompt,
        model_settings={
            "max_tokens": int(config.max_tokens),
            "temperature": config.temperature,
        },
        retries=0,
    )
