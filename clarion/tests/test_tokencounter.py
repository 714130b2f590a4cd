import logging
from types import SimpleNamespace

import pytest

from clarion.clarioncore.agent.models import Agent, LLMConfig, OutputSchema
from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import APPROXIMATION
from clarion.clarioncore.errors import ConfigurationError
from clarion.clarioncore.tokencounter.anthropic_counter import AnthropicCounter
from clarion.clarioncore.tokencounter.counter import (
    ApproximationCounter,
    CounterRegistry,
    TokenCounterService,
    assemble_count_content,
    basic_token_approximation,
    format_codebase_for_count,
)
from clarion.clarioncore.tokencounter.registration import setup_counters
from clarion.clarioncore.tokencounter.tiktoken_counter import TiktokenCounter


class FixedCounter:
    def __init__(self, value):
        self.value = value
        self.calls = []

    def count(self, model_name, content, *, config_id=""):
        self.calls.append((model_name, content, config_id))
        return self.value


class BrokenCounter:
    def count(self, model_name, content, *, config_id=""):
        raise RuntimeError("tokenizer offline")


def _agent(provider="OpenAI", schema=None):
    return Agent(
        system_prompt="SYS",
        output_schema=OutputSchema(schema=schema or {}),
        llm_config=LLMConfig(provider=provider, model="m-1", config_id="cfg"),
    )


# ---------------------- approximation ----------------------


def test_hello_world_is_three_tokens():
    assert basic_token_approximation("hello world") == 3


def test_empty_is_zero():
    assert basic_token_approximation("") == 0
    assert basic_token_approximation("   \n\t ") == 0


def test_punctuation_splits_words():
    # foo, bar, baz -> 3 words -> ceil(3.99)
    assert basic_token_approximation("foo.bar(baz)") == 4


def test_unicode_punctuation_splits_words():
    assert basic_token_approximation("«hola»¿qué?") == basic_token_approximation("hola qué")


# ---------------------- content assembly ----------------------


def test_assemble_count_content_without_schema():
    content = assemble_count_content(_agent(), "do it", "CODE")
    assert content == "SYS\n\n## Codebase Context\nCODE\n\n## User's Task\ndo it"


def test_assemble_count_content_with_schema():
    content = assemble_count_content(_agent(schema={"type": "object"}), "do it", "CODE")
    assert content.endswith(
        "do it\n\n## Output Schema\n```json\n{\n  \"type\": \"object\"\n}\n```\n"
    )


def test_format_codebase_for_count():
    out = format_codebase_for_count({"b": "2", "a": "1"})
    assert out == "File: a\n```\n1\n```\n\nFile: b\n```\n2\n```"
    assert format_codebase_for_count({}) == ""


def test_schema_keys_are_sorted():
    content = assemble_count_content(
        _agent(schema={"type": "object", "properties": {"b": {}, "a": {}}}), "p", "c"
    )
    assert content.index('"a"') < content.index('"b"')
    assert content.index('"properties"') < content.index('"type"')


# ---------------------- service ----------------------


def test_service_uses_registered_counter():
    registry = CounterRegistry()
    counter = FixedCounter(42)
    registry.register("OpenAI", counter)

    assert TokenCounterService(registry).count(_agent(), "p", "c") == 42
    model, content, config_id = counter.calls[0]
    assert model == "m-1"
    assert config_id == "cfg"
    assert content.startswith("SYS\n\n## Codebase Context\nc")


def test_service_falls_back_to_approximation_for_unknown_provider():
    service = TokenCounterService(CounterRegistry())
    agent = _agent(provider="Nobody")
    expected = basic_token_approximation(assemble_count_content(agent, "p", "c"))
    assert service.count(agent, "p", "c") == expected


def test_service_falls_back_when_counter_fails(caplog):
    registry = CounterRegistry()
    registry.register("OpenAI", BrokenCounter())
    agent = _agent()

    with caplog.at_level(logging.WARNING):
        n = TokenCounterService(registry).count(agent, "p", "c")

    assert n == basic_token_approximation(assemble_count_content(agent, "p", "c"))
    assert "falling back to approximation" in caplog.text
    assert "tokenizer offline" in caplog.text


def test_service_requires_agent():
    with pytest.raises(ValueError, match="agent cannot be nil"):
        TokenCounterService().count(None, "p", "c")


def test_counter_registry_last_wins():
    registry = CounterRegistry()
    first, second = FixedCounter(1), FixedCounter(2)
    registry.register("OpenAI", first)
    registry.register("OpenAI", second)
    assert registry.get("OpenAI") is second
    assert isinstance(registry.get(APPROXIMATION), ApproximationCounter)


def test_counter_lookup_accepts_provider_aliases():
    registry = CounterRegistry()
    registry.register("OpenAI", FixedCounter(999))

    assert TokenCounterService(registry).count(_agent(provider="openai"), "p", "c") == 999
    assert registry.get("Unknown") is None


def test_setup_counters(credentials):
    registry = setup_counters(CounterRegistry(), credentials, default_model="gpt-4o-mini")

    openai_counter = registry.get("OpenAI")
    assert isinstance(openai_counter, TiktokenCounter)
    assert openai_counter.default_model == "gpt-4o-mini"
    assert registry.get("OpenRouter") is openai_counter
    assert isinstance(registry.get("Anthropic"), AnthropicCounter)
    assert isinstance(registry.get("Google Gemini"), ApproximationCounter)
    assert isinstance(registry.get(APPROXIMATION), ApproximationCounter)


# ---------------------- anthropic ----------------------


class FakeAnthropic:
    def __init__(self, tokens):
        self.requests = []
        self.messages = SimpleNamespace(count_tokens=self._count)
        self.tokens = tokens

    def _count(self, **kw):
        self.requests.append(kw)
        return SimpleNamespace(input_tokens=self.tokens)


def test_anthropic_counter_calls_endpoint(credentials):
    fake = FakeAnthropic(17)
    seen = []

    def factory(api_key, base_url):
        seen.append(api_key)
        return fake

    counter = AnthropicCounter(credentials, client_factory=factory)
    assert counter.count("claude-3-haiku", "hello", config_id="cfg") == 17
    assert seen == ["sk-test"]
    assert fake.requests[0]["messages"] == [{"role": "user", "content": "hello"}]
    assert fake.requests[0]["model"] == "claude-3-haiku"


def test_anthropic_counter_without_credentials_raises(credentials):
    counter = AnthropicCounter(credentials, client_factory=lambda *_: FakeAnthropic(1))
    with pytest.raises(ConfigurationError):
        counter.count("claude-3-haiku", "hello", config_id="")


def test_anthropic_failure_degrades_in_service(credentials):
    registry = CounterRegistry()
    registry.register("Anthropic", AnthropicCounter(credentials, client_factory=lambda *_: FakeAnthropic(1)))
    agent = _agent(provider="Anthropic")
    agent.llm_config.config_id = "missing"

    n = TokenCounterService(registry).count(agent, "p", "c")
    assert n == basic_token_approximation(assemble_count_content(agent, "p", "c"))
