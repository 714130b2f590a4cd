from __future__ import annotations
import json
import logging
from typing import Protocol, Any, Callable, Dict, List, Mapping, Optional

from clarion.clarioncore.agent.models import AgentRunRequest
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    CredentialResolver,
    LLMProviderConfig,
)
from clarion.clarioncore.ai_clients.protocols.protocol_chat import ChatMessage
from clarion.clarioncore.errors import (
    ConfigurationError,
    ProviderNotImplementedError,
    StructuredOutputParseError,
)

logger = logging.getLogger(__name__)

# (api_key, base_url) -> SDK client
ClientFactory = Callable[[str, Optional[str]], Any]

StructuredOutput = Dict[str, Any]


class LLMProvider(Protocol):
    """
    The polymorphic surface every backend implements. `generate` returns the
    model's structured output as a plain JSON mapping.
    """

    name: str

    def build_payload(
        self, request: AgentRunRequest, messages: List[ChatMessage]
    ) -> Dict[str, Any]: ...

    def generate(
        self,
        messages: List[ChatMessage],
        request: AgentRunRequest,
        credentials: CredentialResolver,
    ) -> StructuredOutput: ...


def resolve_provider_config(
    request: AgentRunRequest, credentials: CredentialResolver
) -> LLMProviderConfig:
    """Look up the stored credential for a run; any gap is a configuration error."""
    return resolve_config_id(request.llm_config.config_id, credentials)


def resolve_config_id(
    config_id: str, credentials: CredentialResolver
) -> LLMProviderConfig:
    if not config_id:
        raise ConfigurationError("agent's LLM configuration is missing a Config ID")

    try:
        cfg = credentials.get_llm_config(config_id)
    except KeyError as e:
        raise ConfigurationError(
            f"failed to load LLM config '{config_id}': {e}"
        ) from e

    if not cfg.api_key:
        raise ConfigurationError(f"API key for LLM config '{config_id}' is empty")
    return cfg


def forward_params(
    parameters: Mapping[str, Any], mapping: Mapping[str, str]
) -> Dict[str, Any]:
    """Copy only the parameters that are present (and not None), renamed per `mapping`."""
    out: Dict[str, Any] = {}
    for internal, wire in mapping.items():
        value = parameters.get(internal)
        if value is not None:
            out[wire] = value
    return out


def coerce_int_param(payload: Dict[str, Any], key: str) -> None:
    """Cast a forwarded token limit to int in place; junk is a configuration error."""
    if key not in payload:
        return
    try:
        payload[key] = int(payload[key])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"LLM parameter '{key}' must be an integer, got {payload[key]!r}"
        ) from e


def parse_structured_text(text: str) -> StructuredOutput:
    """Decode the model's JSON text; anything but a JSON object is an error."""
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise StructuredOutputParseError(
            f"failed to unmarshal structured output from model response: {e}", text
        ) from e
    if not isinstance(data, dict):
        raise StructuredOutputParseError(
            "structured output from model response is not a JSON object", text
        )
    return data


def to_plain(resp: Any) -> Any:
    """SDK response object / JSON string / dict -> plain python data."""
    if hasattr(resp, "model_dump"):
        return resp.model_dump(mode="json")
    if isinstance(resp, (bytes, str)):
        return json.loads(resp)
    return resp


class NotImplementedProvider:
    """Registered placeholder for a backend that is not wired up yet."""

    name = ""

    def build_payload(
        self, request: AgentRunRequest, messages: List[ChatMessage]
    ) -> Dict[str, Any]:
        raise ProviderNotImplementedError(self.name)

    def generate(
        self,
        messages: List[ChatMessage],
        request: AgentRunRequest,
        credentials: CredentialResolver,
    ) -> StructuredOutput:
        logger.warning("%s provider selected, but it is not implemented yet.", self.name)
        raise ProviderNotImplementedError(self.name)
