# dataclasses_config.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any, List, Protocol
import json
import threading

from clarion.clarioncore.errors import ConfigurationError


class Provider(str, Enum):
    openai = "OpenAI"
    anthropic = "Anthropic"
    gemini = "Google Gemini"
    openrouter = "OpenRouter"


APPROXIMATION = "Approximation"

DEFAULT_OPENAI_CONFIG_ID = "default_openai"


# ---------------------- atomic data carriers ----------------------


@dataclass
class LLMProviderConfig:
    """A stored credential record, looked up by id at call time."""

    id: str
    name: str
    provider: str
    api_key: str = ""
    base_url: Optional[str] = None

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def to_dict(self, *, redact: bool = True) -> Dict[str, Any]:
        d = asdict(self)
        if redact and d["api_key"]:
            d["api_key"] = d["api_key"][:3] + "…"
        return d

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


class CredentialResolver(Protocol):
    """Anything that can resolve an LLM config id; raises KeyError when unknown."""

    def get_llm_config(self, config_id: str) -> LLMProviderConfig: ...


class InMemoryLLMConfigStore:
    """Process-local credential store; the persistent stores live outside the core."""

    def __init__(self, configs: Optional[List[LLMProviderConfig]] = None):
        self._lock = threading.RLock()
        self._configs: Dict[str, LLMProviderConfig] = {}
        for cfg in configs or []:
            self.save_llm_config(cfg)

    def save_llm_config(self, config: LLMProviderConfig) -> None:
        if not config.id:
            raise ConfigurationError("llm_configs id cannot be empty")
        with self._lock:
            self._configs[config.id] = config

    def get_llm_config(self, config_id: str) -> LLMProviderConfig:
        with self._lock:
            try:
                return self._configs[config_id]
            except KeyError:
                raise KeyError(f"llm_configs '{config_id}' not found") from None

    def list_llm_configs(self) -> List[LLMProviderConfig]:
        with self._lock:
            return list(self._configs.values())

    def delete_llm_config(self, config_id: str) -> None:
        with self._lock:
            if config_id not in self._configs:
                raise KeyError(f"llm_configs '{config_id}' not found")
            del self._configs[config_id]


def store_from_settings(settings: Any) -> InMemoryLLMConfigStore:
    """Seed a store with the OpenAI key from application settings, when present."""
    store = InMemoryLLMConfigStore()
    api_key = getattr(settings, "openai_api_key", None)
    if api_key:
        store.save_llm_config(
            LLMProviderConfig(
                id=DEFAULT_OPENAI_CONFIG_ID,
                name="Default OpenAI (settings)",
                provider=Provider.openai.value,
                api_key=api_key,
                base_url=getattr(settings, "openai_base_url", None),
            )
        )
    return store
