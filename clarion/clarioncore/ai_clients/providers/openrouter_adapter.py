from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

from openai import APIStatusError

from clarion.clarioncore.agent.models import AgentRunRequest
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import Provider
from clarion.clarioncore.ai_clients.protocols.protocol_chat import (
    ChatMessage,
    to_openai_messages,
)
from clarion.clarioncore.ai_clients.providers.base import (
    ClientFactory,
    StructuredOutput,
    coerce_int_param,
    forward_params,
    parse_structured_text,
)
from clarion.clarioncore.ai_clients.providers.openai_adapter import (
    OpenAIAdapter,
    STRUCTURED_OUTPUT_NAME,
)
from clarion.clarioncore.ai_clients.schema import extract_output_schema
from clarion.clarioncore.errors import ProviderHTTPError, ProviderResponseError

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# <agent parameter name> : <chat-completions parameter name>
PARAMS_MAPPING = {
    "temperature": "temperature",
    "top_p": "top_p",
    "max_tokens": "max_tokens",
}


def _error_message(body: str) -> str:
    """OpenRouter wraps failures as {"error": {"message": ...}}; fall back to the raw body."""
    try:
        msg = (json.loads(body).get("error") or {}).get("message")
    except (ValueError, AttributeError):
        msg = None
    return msg or body


class OpenRouterAdapter(OpenAIAdapter):
    """Chat-completions flavour of the OpenAI wire protocol, served by OpenRouter."""

    name = Provider.openrouter.value

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        base_url: Optional[str] = OPENROUTER_BASE_URL,
    ):
        super().__init__(client_factory=client_factory, base_url=base_url)

    def build_payload(
        self, request: AgentRunRequest, messages: List[ChatMessage]
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.llm_config.model,
            "messages": to_openai_messages(messages),
        }

        schema = extract_output_schema(request.output_schema)
        if schema is not None:
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": STRUCTURED_OUTPUT_NAME,
                    "strict": True,
                    "schema": schema,
                },
            }

        payload.update(forward_params(request.llm_config.parameters, PARAMS_MAPPING))
        coerce_int_param(payload, "max_tokens")
        return payload

    def _call(self, client: Any, payload: Dict[str, Any]) -> Any:
        try:
            return client.chat.completions.create(**payload)
        except APIStatusError as e:
            raise ProviderHTTPError(
                self.name, e.status_code, _error_message(e.response.text)
            ) from e

    def extract_output(self, data: Dict[str, Any]) -> StructuredOutput:
        err = data.get("error")
        if err:
            msg = err.get("message") if isinstance(err, dict) else err
            raise ProviderResponseError(f"{self.name} API returned an error: {msg}")

        choices = data.get("choices") or []
        if not choices:
            raise ProviderResponseError(
                f"invalid response from {self.name}: choices array is empty"
            )
        message = choices[0].get("message") or {}
        return parse_structured_text(message.get("content") or "")
