# clarion/clarioncore/ai_clients/providers/gemini_adapter.py
from __future__ import annotations

from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import Provider
from clarion.clarioncore.ai_clients.providers.base import NotImplementedProvider


class GeminiAdapter(NotImplementedProvider):
    name = Provider.gemini.value
