"""Token estimates for the UI budget display.

Exact counts come from a provider-specific counter when one is registered;
anything else (no counter, counter failure) degrades to a word-based
approximation instead of failing the request.
"""

from __future__ import annotations
import json
import logging
import math
import threading
import unicodedata
from typing import Dict, Mapping, Optional, Protocol

from clarion.clarioncore.agent.models import Agent
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import APPROXIMATION
from clarion.clarioncore.ai_clients.providers.registry import canonicalize_provider
from clarion.engines.prompts import (
    CODEBASE_CONTEXT_HEADER,
    COUNT_OUTPUT_SCHEMA_HEADER,
    FILE_BLOCK,
    USER_TASK_HEADER,
)

logger = logging.getLogger(__name__)

WORD_TOKEN_MULTIPLIER = 1.33  # 1 token ~ 0.75 words


class TokenCounter(Protocol):
    def count(self, model_name: str, content: str, *, config_id: str = "") -> int: ...


def _is_separator(ch: str) -> bool:
    return ch.isspace() or unicodedata.category(ch).startswith("P")


def basic_token_approximation(text: str) -> int:
    """Words (runs of non-space, non-punctuation chars) * 1.33, rounded up."""
    if not text:
        return 0
    words = 0
    in_word = False
    for ch in text:
        if _is_separator(ch):
            in_word = False
        elif not in_word:
            words += 1
            in_word = True
    return int(math.ceil(words * WORD_TOKEN_MULTIPLIER))


class ApproximationCounter:
    def count(self, model_name: str, content: str, *, config_id: str = "") -> int:
        return basic_token_approximation(content)


class CounterRegistry:
    """Provider name -> TokenCounter. Later registrations replace earlier ones."""

    def __init__(self):
        self._lock = threading.RLock()
        self._counters: Dict[str, TokenCounter] = {APPROXIMATION: ApproximationCounter()}

    def register(self, provider_name: str, counter: TokenCounter) -> None:
        with self._lock:
            self._counters[provider_name] = counter

    def get(self, provider_name: str) -> Optional[TokenCounter]:
        """Exact name first, then the same aliases the provider registry accepts."""
        with self._lock:
            counter = self._counters.get(provider_name)
            if counter is None:
                counter = self._counters.get(canonicalize_provider(provider_name))
            return counter


def format_codebase_for_count(codebase_content: Mapping[str, str]) -> str:
    """Sorted `File:` blocks, stripped, exactly as the token endpoint sends them."""
    blocks = [
        FILE_BLOCK.format(path=p, content=codebase_content[p])
        for p in sorted(codebase_content)
    ]
    return "".join(blocks).strip()


def assemble_count_content(agent: Agent, user_prompt: str, codebase_content: str) -> str:
    parts = [
        agent.system_prompt,
        "\n\n",
        CODEBASE_CONTEXT_HEADER,
        codebase_content,
        "\n\n",
        USER_TASK_HEADER,
        user_prompt,
    ]
    schema = agent.output_schema.schema_
    if schema:
        parts += [
            "\n\n",
            COUNT_OUTPUT_SCHEMA_HEADER,
            "```json\n",
            json.dumps(schema, indent=2, ensure_ascii=False, sort_keys=True, default=str),
            "\n```\n",
        ]
    return "".join(parts)


class TokenCounterService:
    def __init__(self, registry: Optional[CounterRegistry] = None):
        self.registry = registry or CounterRegistry()

    def count(
        self, agent: Optional[Agent], user_prompt: str, codebase_content: str
    ) -> int:
        if agent is None:
            raise ValueError("agent cannot be nil")

        provider_name = agent.llm_config.provider
        counter = self.registry.get(provider_name) or self.registry.get(APPROXIMATION)
        content = assemble_count_content(agent, user_prompt, codebase_content)

        try:
            return counter.count(
                agent.llm_config.model, content, config_id=agent.llm_config.config_id
            )
        except Exception as e:
            fallback = basic_token_approximation(content)
            logger.warning(
                "Provider token counting failed, falling back to approximation "
                "(provider=%s, error=%s, fallback_count=%d)",
                provider_name,
                e,
                fallback,
            )
            return fallback
