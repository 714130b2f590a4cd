from __future__ import annotations
from typing import Any, Callable, Optional

from anthropic import Anthropic

from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    CredentialResolver,
)
from clarion.clarioncore.ai_clients.providers.base import resolve_config_id

DEFAULT_MODEL = "claude-3-5-sonnet-latest"

AnthropicFactory = Callable[[str, Optional[str]], Any]


def _anthropic_client(api_key: str, base_url: Optional[str]) -> Anthropic:
    return Anthropic(api_key=api_key, base_url=base_url or None)


class AnthropicCounter:
    """
    Exact count from Anthropic's token-counting endpoint. Needs the agent's
    stored credential, so it raises (and the caller falls back) when none is set.
    """

    def __init__(
        self,
        credentials: CredentialResolver,
        client_factory: Optional[AnthropicFactory] = None,
    ):
        self.credentials = credentials
        self.client_factory = client_factory or _anthropic_client

    def count(self, model_name: str, content: str, *, config_id: str = "") -> int:
        cfg = resolve_config_id(config_id, self.credentials)
        client = self.client_factory(cfg.api_key, cfg.base_url)
        resp = client.messages.count_tokens(
            model=model_name or DEFAULT_MODEL,
            messages=[{"role": "user", "content": content}],
        )
        return int(resp.input_tokens)
