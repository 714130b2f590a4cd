import httpx
import openai
import pytest

from clarion.clarioncore.agent.models import AgentRunRequest, LLMConfig
from clarion.clarioncore.ai_clients.prompt import build_chat_messages
from clarion.clarioncore.ai_clients.providers.openrouter_adapter import (
    OPENROUTER_BASE_URL,
    OpenRouterAdapter,
)
from clarion.clarioncore.errors import (
    ConfigurationError,
    ProviderHTTPError,
    ProviderResponseError,
    StructuredOutputParseError,
)

from conftest import FakeClientFactory


def _request(parameters=None):
    return AgentRunRequest(
        prompt="List the files",
        output_schema={"schema": {"type": "object", "properties": {"files": {"type": "array", "items": {"type": "string"}}}}},
        llm_config=LLMConfig(
            provider="OpenRouter",
            model="anthropic/claude-3.5-sonnet",
            parameters=parameters or {},
            config_id="cfg",
        ),
    )


def _completion(content):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def test_payload_shape():
    req = _request(parameters={"temperature": 0.1, "max_tokens": 100.0, "max_output_tokens": 9})
    payload = OpenRouterAdapter().build_payload(req, build_chat_messages(req, {}))

    assert payload["model"] == "anthropic/claude-3.5-sonnet"
    assert payload["messages"] == [{"role": "user", "content": "## User's Task\nList the files"}]
    rf = payload["response_format"]
    assert rf["type"] == "json_schema"
    assert rf["json_schema"]["name"] == "structured_output"
    assert rf["json_schema"]["strict"] is True
    assert rf["json_schema"]["schema"]["required"] == ["files"]
    assert payload["temperature"] == 0.1
    assert payload["max_tokens"] == 100
    # Responses-only parameter is not forwarded on chat completions
    assert "max_output_tokens" not in payload


def test_generate_parses_first_choice(credentials):
    factory = FakeClientFactory(_completion('{"files": ["a.go"]}'))
    adapter = OpenRouterAdapter(client_factory=factory)
    req = _request()

    out = adapter.generate(build_chat_messages(req, {}), req, credentials)

    assert out == {"files": ["a.go"]}
    assert factory.seen == [("sk-test", OPENROUTER_BASE_URL)]
    assert "response_format" in factory.calls[0]


def test_generate_empty_choices(credentials):
    adapter = OpenRouterAdapter(client_factory=FakeClientFactory({"choices": []}))
    req = _request()
    with pytest.raises(ProviderResponseError, match="choices array is empty"):
        adapter.generate(build_chat_messages(req, {}), req, credentials)


def test_generate_error_field(credentials):
    body = {"error": {"message": "No endpoints found", "code": 404}}
    adapter = OpenRouterAdapter(client_factory=FakeClientFactory(body))
    req = _request()
    with pytest.raises(ProviderResponseError, match="No endpoints found"):
        adapter.generate(build_chat_messages(req, {}), req, credentials)


def test_generate_bad_json(credentials):
    adapter = OpenRouterAdapter(client_factory=FakeClientFactory(_completion("```json")))
    req = _request()
    with pytest.raises(StructuredOutputParseError):
        adapter.generate(build_chat_messages(req, {}), req, credentials)


def test_http_error_uses_error_message(credentials):
    request = httpx.Request("POST", OPENROUTER_BASE_URL + "/chat/completions")
    response = httpx.Response(
        402, request=request, text='{"error": {"message": "Insufficient credits"}}'
    )
    err = openai.APIStatusError("payment required", response=response, body=None)
    adapter = OpenRouterAdapter(client_factory=FakeClientFactory(err))
    req = _request()

    with pytest.raises(ProviderHTTPError) as exc:
        adapter.generate(build_chat_messages(req, {}), req, credentials)
    assert exc.value.status_code == 402
    assert exc.value.body == "Insufficient credits"


def test_http_error_with_plain_body(credentials):
    request = httpx.Request("POST", OPENROUTER_BASE_URL + "/chat/completions")
    err = openai.APIStatusError(
        "bad gateway", response=httpx.Response(502, request=request, text="upstream down"), body=None
    )
    adapter = OpenRouterAdapter(client_factory=FakeClientFactory(err))
    req = _request()

    with pytest.raises(ProviderHTTPError) as exc:
        adapter.generate(build_chat_messages(req, {}), req, credentials)
    assert exc.value.body == "upstream down"


def test_non_numeric_max_tokens_is_a_configuration_error():
    req = _request(parameters={"max_tokens": "lots"})
    with pytest.raises(ConfigurationError, match="max_tokens"):
        OpenRouterAdapter().build_payload(req, build_chat_messages(req, {}))
