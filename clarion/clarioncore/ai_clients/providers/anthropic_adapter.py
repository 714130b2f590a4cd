# clarion/clarioncore/ai_clients/providers/anthropic_adapter.py
from __future__ import annotations

from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import Provider
from clarion.clarioncore.ai_clients.providers.base import NotImplementedProvider


class AnthropicAdapter(NotImplementedProvider):
    """Anthropic is selectable in agent configs but has no generation backend yet.

    Token counting for Anthropic models is real (see tokencounter.anthropic_counter).
    """

    name = Provider.anthropic.value
