from __future__ import annotations
import logging
import threading
from typing import Dict, List, Optional

from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import Provider
from clarion.clarioncore.ai_clients.providers.anthropic_adapter import AnthropicAdapter
from clarion.clarioncore.ai_clients.providers.base import LLMProvider
from clarion.clarioncore.ai_clients.providers.gemini_adapter import GeminiAdapter
from clarion.clarioncore.ai_clients.providers.openai_adapter import OpenAIAdapter
from clarion.clarioncore.ai_clients.providers.openrouter_adapter import (
    OPENROUTER_BASE_URL,
    OpenRouterAdapter,
)
from clarion.clarioncore.errors import UnsupportedProviderError

logger = logging.getLogger(__name__)

# Friendly aliases users might type in configs (matched case-insensitively).
ALIASES: Dict[str, str] = {
    "openai": Provider.openai.value,
    "open-ai": Provider.openai.value,
    "anthropic": Provider.anthropic.value,
    "claude": Provider.anthropic.value,
    "google gemini": Provider.gemini.value,
    "gemini": Provider.gemini.value,
    "google": Provider.gemini.value,
    "openrouter": Provider.openrouter.value,
    "open-router": Provider.openrouter.value,
}


def canonicalize_provider(p: Optional[str]) -> str:
    key = (p or "").strip()
    return ALIASES.get(key.lower(), key)


class ProviderRegistry:
    """
    Name -> provider lookup table. Populated once by the composition root,
    then read concurrently by runs.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._providers: Dict[str, LLMProvider] = {}

    def register(self, name: str, provider: LLMProvider) -> None:
        """First registration wins; re-registering a name is a silent no-op."""
        with self._lock:
            if name in self._providers:
                logger.debug("Provider %r already registered; keeping the first one", name)
                return
            self._providers[name] = provider

    def get(self, name: str) -> LLMProvider:
        with self._lock:
            provider = self._providers.get(name)
            if provider is None:
                provider = self._providers.get(canonicalize_provider(name))
        if provider is None:
            raise UnsupportedProviderError(name)
        return provider

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._providers


def register_default_providers(
    registry: ProviderRegistry,
    *,
    openai_base_url: Optional[str] = None,
    openrouter_base_url: Optional[str] = None,
) -> ProviderRegistry:
    registry.register(Provider.openai.value, OpenAIAdapter(base_url=openai_base_url))
    registry.register(Provider.anthropic.value, AnthropicAdapter())
    registry.register(Provider.gemini.value, GeminiAdapter())
    registry.register(
        Provider.openrouter.value,
        OpenRouterAdapter(base_url=openrouter_base_url or OPENROUTER_BASE_URL),
    )
    return registry
