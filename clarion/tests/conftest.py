from types import SimpleNamespace

import pytest

from clarion.clarioncore.ai_clients.dataclasses.dataclasses_config import (
    InMemoryLLMConfigStore,
    LLMProviderConfig,
)


class FakeEndpoint:
    """Records every `create(**payload)` call and replays a canned response (or raises it)."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    def create(self, **payload):
        self.calls.append(payload)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeClientFactory:
    """Stands in for the OpenAI SDK client constructor."""

    def __init__(self, response=None):
        self.endpoint = FakeEndpoint(response)
        self.seen = []  # (api_key, base_url) per client built

    def __call__(self, api_key, base_url):
        self.seen.append((api_key, base_url))
        return SimpleNamespace(
            responses=self.endpoint,
            chat=SimpleNamespace(completions=self.endpoint),
        )

    @property
    def calls(self):
        return self.endpoint.calls


@pytest.fixture()
def credentials():
    return InMemoryLLMConfigStore(
        [
            LLMProviderConfig(id="cfg", name="Test OpenAI", provider="OpenAI", api_key="sk-test"),
            LLMProviderConfig(id="empty", name="No key", provider="OpenAI", api_key=""),
        ]
    )


@pytest.fixture()
def project(tmp_path):
    # small fake repo with a couple of ignored directories
    (tmp_path / "src" / "util").mkdir(parents=True)
    (tmp_path / "src" / "main.go").write_text("package main\n\nfunc main() {}\n")
    (tmp_path / "src" / "util" / "strings.go").write_text("package util\n")
    (tmp_path / "README.md").write_text("# demo\n")
    (tmp_path / "node_modules" / "left-pad").mkdir(parents=True)
    (tmp_path / "node_modules" / "left-pad" / "index.js").write_text("module.exports = 1\n")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    return tmp_path
