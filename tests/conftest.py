import os
import tempfile
from pathlib import Path

# Point the config loader at an empty file BEFORE any orchard imports so a
# local orchard.yaml never leaks into test runs.
_test_config_dir = tempfile.mkdtemp()
_test_config_path = Path(_test_config_dir) / "test-defaults.yaml"
_test_config_path.write_text("{}")
os.environ["ORCHARD_CONFIG_PATH"] = str(_test_config_path)

import asyncio  # noqa: E402
from collections.abc import Callable  # noqa: E402

import pytest  # noqa: E402
import yaml  # noqa: E402

from orchard.llm.models import (  # noqa: E402
    ChatMessage,
    ChatResponse,
    ToolDefinition,
    Usage,
)

Responder = Callable[[list[ChatMessage], list[ToolDefinition] | None], ChatResponse]


class ScriptedChat:
    """ChatClient double that answers through a callback and records calls."""

    def __init__(self, responder: Responder | None = None, delay: float = 0.0):
        self._responder = responder or (
            lambda messages, tools: reply(messages[-1].content)
        )
        self.delay = delay
        self.calls: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def chat(self, messages, tools=None, temperature=None):
        self.calls.append(
            {"messages": list(messages), "tools": tools, "temperature": temperature}
        )
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self._responder(messages, tools)
        finally:
            self.in_flight -= 1


def reply(content: str, tokens: int = 0, **kwargs) -> ChatResponse:
    return ChatResponse(
        content=content,
        usage=Usage(
            prompt_tokens=tokens, completion_tokens=tokens, total_tokens=2 * tokens
        ),
        **kwargs,
    )


class KeywordEmbedder:
    """Deterministic embedder mapping texts onto fixed topic axes."""

    topics = ("cat", "dog", "car", "sun")

    def __init__(self, fail_on: str | None = None):
        self.vector_dim = len(self.topics)
        self.fail_on = fail_on
        self.calls: list[str] = []

    def vector(self, text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(topic)) for topic in self.topics]

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("embedding backend unavailable")
        return self.vector(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]


@pytest.fixture
def scripted_chat():
    return ScriptedChat


@pytest.fixture
def keyword_embedder():
    return KeywordEmbedder()


@pytest.fixture
def temp_yaml_config(tmp_path, monkeypatch):
    """Write a YAML config file and point ORCHARD_CONFIG_PATH at it."""
    config_file = tmp_path / "test-config.yaml"
    config_data = {
        "environment": "development",
        "orchestrator": {
            "max_workers": 2,
            "model": {"provider": "openai", "name": "gpt-4o-mini"},
        },
        "raptor": {"max_levels": 2, "cluster_size": 4},
        "embeddings": {
            "model": {
                "provider": "ollama",
                "name": "nomic-embed-text",
                "vector_dim": 768,
            }
        },
    }

    with open(config_file, "w") as f:
        yaml.dump(config_data, f)

    monkeypatch.setenv("ORCHARD_CONFIG_PATH", str(config_file))

    yield config_file


@pytest.fixture
def make_reply():
    return reply


@pytest.fixture
def embedder_factory():
    return KeywordEmbedder
