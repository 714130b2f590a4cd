from __future__ import annotations

from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    APPROXIMATION,
    CredentialResolver,
    Provider,
)
from clarion.clarioncore.tokencounter.anthropic_counter import AnthropicCounter
from clarion.clarioncore.tokencounter.counter import ApproximationCounter, CounterRegistry
from clarion.clarioncore.tokencounter.tiktoken_counter import DEFAULT_MODEL, TiktokenCounter


def setup_counters(
    registry: CounterRegistry,
    credentials: CredentialResolver,
    *,
    default_model: str = DEFAULT_MODEL,
) -> CounterRegistry:
    tiktoken_counter = TiktokenCounter(default_model=default_model)
    registry.register(Provider.openai.value, tiktoken_counter)
    registry.register(Provider.openrouter.value, tiktoken_counter)
    registry.register(Provider.anthropic.value, AnthropicCounter(credentials))
    # Gemini has no offline tokenizer here; approximate until one is wired.
    registry.register(Provider.gemini.value, ApproximationCounter())
    registry.register(APPROXIMATION, ApproximationCounter())
    return registry
