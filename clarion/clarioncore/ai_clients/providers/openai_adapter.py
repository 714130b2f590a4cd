# clarion/clarioncore/ai_clients/providers/openai_adapter.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, APIConnectionError, APIStatusError

from clarion.clarioncore.agent.models import AgentRunRequest
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    CredentialResolver,
    Provider,
)
from clarion.clarioncore.ai_clients.protocols.protocol_chat import (
    ChatMessage,
    to_openai_messages,
)
from clarion.clarioncore.ai_clients.providers.base import (
    ClientFactory,
    LLMProvider,
    StructuredOutput,
    coerce_int_param,
    forward_params,
    parse_structured_text,
    resolve_provider_config,
    to_plain,
)
from clarion.clarioncore.ai_clients.schema import extract_output_schema
from clarion.clarioncore.errors import (
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)

STRUCTURED_OUTPUT_NAME = "structured_output"

# <agent parameter name> : <Responses API parameter name>
# later keys win, so an explicit max_output_tokens beats max_tokens
PARAMS_MAPPING = {
    "temperature": "temperature",
    "top_p": "top_p",
    "max_tokens": "max_output_tokens",
    "max_output_tokens": "max_output_tokens",
}


def _openai_client(api_key: str, base_url: Optional[str]) -> OpenAI:
    return OpenAI(api_key=api_key, base_url=base_url)


def first_output_text(output: Any) -> Optional[str]:
    """
    Responses API convention: the structured output is the text of the first
    `message` item whose first content entry is `output_text`.
    """
    for item in output or []:
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        content = item.get("content") or []
        if content and isinstance(content[0], dict) and content[0].get("type") == "output_text":
            return content[0].get("text") or ""
    return None


class OpenAIAdapter(LLMProvider):
    name = Provider.openai.value

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        base_url: Optional[str] = None,
    ):
        self.client_factory: ClientFactory = client_factory or _openai_client
        self.base_url = base_url

    # ---- payload ----
    def build_payload(
        self, request: AgentRunRequest, messages: List[ChatMessage]
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.llm_config.model,
            "input": to_openai_messages(messages),
        }

        schema = extract_output_schema(request.output_schema)
        if schema is not None:
            payload["text"] = {
                "format": {
                    "type": "json_schema",
                    "name": STRUCTURED_OUTPUT_NAME,
                    "schema": schema,
                    "strict": True,
                }
            }

        params = request.llm_config.parameters
        payload.update(forward_params(params, PARAMS_MAPPING))
        coerce_int_param(payload, "max_output_tokens")
        effort = params.get("reasoning_effort")
        if isinstance(effort, str) and effort:
            payload["reasoning"] = {"effort": effort}
        return payload

    # ---- call ----
    def _call(self, client: Any, payload: Dict[str, Any]) -> Any:
        return client.responses.create(**payload)

    def generate(
        self,
        messages: List[ChatMessage],
        request: AgentRunRequest,
        credentials: CredentialResolver,
    ) -> StructuredOutput:
        cfg = resolve_provider_config(request, credentials)
        payload = self.build_payload(request, messages)
        client = self.client_factory(cfg.api_key, cfg.base_url or self.base_url)

        logger.info(
            "Calling %s model=%s messages=%d", self.name, payload.get("model"), len(messages)
        )
        try:
            resp = self._call(client, payload)
        except APIStatusError as e:
            raise ProviderHTTPError(self.name, e.status_code, e.response.text) from e
        except APIConnectionError as e:
            raise ProviderError(f"error making HTTP request to {self.name}: {e}") from e

        data = to_plain(resp)
        logger.debug("Raw %s response body: %s", self.name, data)
        if not isinstance(data, dict):
            raise ProviderResponseError(
                f"failed to unmarshal {self.name} response structure: {data!r}"
            )
        return self.extract_output(data)

    def extract_output(self, data: Dict[str, Any]) -> StructuredOutput:
        if data.get("error"):
            raise ProviderResponseError(
                f"{self.name} API returned an error in the response body: {data['error']}"
            )
        text = first_output_text(data.get("output"))
        if text is None:
            raise ProviderResponseError(
                "invalid response structure: could not find a 'message' with "
                "'output_text' in the API response"
            )
        return parse_structured_text(text)
