import asyncio
import json
import re
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import numpy as np

_JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.DOTALL)
_ANY_FENCE = re.compile(r"```\s*(.*?)```", re.DOTALL)


def apply_common_settings(
    settings: Any | None,
    settings_class: type[Any],
    model_config: Any,
) -> Any | None:
    """Apply common settings (temperature, max_tokens) to model settings.

    Args:
        settings: Existing settings instance or None
        settings_class: Settings class to instantiate if needed
        model_config: ModelConfig with temperature and max_tokens

    Returns:
        Updated settings instance or None if no settings to apply
    """
    if model_config.temperature is None and model_config.max_tokens is None:
        return settings

    settings_dict = settings_class() if settings is None else settings

    if model_config.temperature is not None:
        settings_dict["temperature"] = model_config.temperature

    if model_config.max_tokens is not None:
        settings_dict["max_tokens"] = model_config.max_tokens

    return settings_dict


def get_model(
    model_config: Any,
    app_config: Any | None = None,
) -> Any:
    """
    Get a pydantic-ai model instance for the specified configuration.

    Args:
        model_config: ModelConfig with provider, model, and settings
        app_config: AppConfig for provider base URLs (defaults to global Config)

    Returns:
        A configured model instance, or a "provider:name" string that
        pydantic-ai resolves itself for providers not handled here
    """
    from pydantic_ai.models.openai import OpenAIChatModel, OpenAIChatModelSettings
    from pydantic_ai.providers.ollama import OllamaProvider
    from pydantic_ai.providers.openai import OpenAIProvider

    if app_config is None:
        from orchard.config import Config

        app_config = Config

    provider = model_config.provider
    model = model_config.name

    if provider == "ollama":
        base_url = model_config.base_url or app_config.providers.ollama.base_url
        return OpenAIChatModel(
            model_name=model,
            provider=OllamaProvider(base_url=f"{base_url.rstrip('/')}/v1"),
            settings=apply_common_settings(
                None, OpenAIChatModelSettings, model_config
            ),
        )

    elif provider == "openai":
        openai_provider: Any = "openai"
        if model_config.base_url:
            openai_provider = OpenAIProvider(base_url=model_config.base_url)
        return OpenAIChatModel(
            model_name=model,
            provider=openai_provider,
            settings=apply_common_settings(
                None, OpenAIChatModelSettings, model_config
            ),
        )

    elif provider == "anthropic":
        from pydantic_ai.models.anthropic import AnthropicModel, AnthropicModelSettings

        return AnthropicModel(
            model_name=model,
            settings=apply_common_settings(
                None, AnthropicModelSettings, model_config
            ),
        )

    elif provider == "vllm":
        base_url = model_config.base_url or app_config.providers.vllm.base_url
        return OpenAIChatModel(
            model_name=model,
            provider=OpenAIProvider(
                base_url=f"{base_url.rstrip('/')}/v1", api_key="none"
            ),
            settings=apply_common_settings(
                None, OpenAIChatModelSettings, model_config
            ),
        )

    return f"{provider}:{model}"


def extract_json(text: str) -> str:
    """Pull a JSON object out of free-form model output.

    Tries a ```json fenced block, then any fenced block, then the span from
    the first "{" to the last "}". Falls back to the stripped text.
    """
    for pattern in (_JSON_FENCE, _ANY_FENCE):
        match = pattern.search(text)
        if match:
            return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]

    return text.strip()


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Decode the JSON object embedded in text, or None if there is none."""
    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def truncate(text: str, limit: int) -> str:
    """Cut text to at most limit characters, marking the cut with "..."."""
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[:limit]
    return text[: limit - 3] + "..."


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for empty vectors, vectors of different lengths, or when
    either vector has zero norm.
    """
    if len(a) == 0 or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)


class ReadWriteLock:
    """Asyncio reader/writer lock.

    Any number of readers may hold the lock at once; a writer holds it
    exclusively. Waiting writers block new readers so writes are not starved.
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @asynccontextmanager
    async def reading(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(
                lambda: not self._writer and self._writers_waiting == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @asynccontextmanager
    async def writing(self) -> AsyncIterator[None]:
        async with self._condition:
            self._writers_waiting += 1
            try:
                await self._condition.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            finally:
                self._writers_waiting -= 1
                if self._writers_waiting == 0:
                    self._condition.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._condition:
                self._writer = False
                self._condition.notify_all()
