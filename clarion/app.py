from __future__ import annotations
import logging
from typing import Optional

from clarion.config import Settings
from clarion.logging_utils import configure_logging
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    CredentialResolver,
    store_from_settings,
)
from clarion.clarioncore.ai_clients.providers.registry import (
    ProviderRegistry,
    register_default_providers,
)
from clarion.clarioncore.tokencounter.counter import CounterRegistry, TokenCounterService
from clarion.clarioncore.tokencounter.registration import setup_counters
from clarion.engines.agent_engine import AgentEngine

logger = logging.getLogger(__name__)


def create_engine(
    settings: Optional[Settings] = None,
    credentials: Optional[CredentialResolver] = None,
    *,
    configure_logs: bool = True,
) -> AgentEngine:
    """
    Composition root: both registries are filled here, before the engine is
    handed to any concurrent caller.
    """
    settings = settings or Settings.load()
    if configure_logs:
        configure_logging(settings.log_level.upper(), settings.log_file)

    credentials = credentials or store_from_settings(settings)

    providers = register_default_providers(
        ProviderRegistry(),
        openai_base_url=settings.openai_base_url,
        openrouter_base_url=settings.openrouter_base_url,
    )
    counters = setup_counters(
        CounterRegistry(), credentials, default_model=settings.tokenizer_default_model
    )

    logger.info("Registered LLM providers: %s", ", ".join(providers.names()))
    return AgentEngine(
        providers=providers,
        token_counter=TokenCounterService(counters),
        credentials=credentials,
    )
