import json

import httpx
import pytest

from orchard.config import AppConfig
from orchard.embeddings import (
    EmbeddingError,
    OpenAICompatibleEmbedder,
    get_embedder,
)


def embeddings_transport(requests, dim=3, drop_last=False):
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        requests.append((str(request.url), payload, request.headers))
        inputs = payload["input"]
        data = [
            {"index": i, "embedding": [float(len(text))] * dim}
            for i, text in enumerate(inputs)
        ]
        if drop_last:
            data = data[:-1]
        # Servers may return items out of order.
        return httpx.Response(200, json={"data": list(reversed(data))})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
class TestOpenAICompatibleEmbedder:
    async def test_embed_batch_preserves_order(self):
        requests = []
        async with httpx.AsyncClient(transport=embeddings_transport(requests)) as client:
            embedder = OpenAICompatibleEmbedder(
                base_url="http://embed.local/v1",
                model="test-model",
                vector_dim=3,
                batch_size=2,
                client=client,
            )
            vectors = await embedder.embed_batch(["a", "bb", "ccc"])

        assert vectors == [[1.0] * 3, [2.0] * 3, [3.0] * 3]
        assert len(requests) == 2
        url, payload, _ = requests[0]
        assert url == "http://embed.local/v1/embeddings"
        assert payload["model"] == "test-model"
        assert payload["input"] == ["a", "bb"]

    async def test_embed_single(self):
        requests = []
        async with httpx.AsyncClient(transport=embeddings_transport(requests)) as client:
            embedder = OpenAICompatibleEmbedder(
                base_url="http://embed.local",
                model="m",
                vector_dim=3,
                api_key="secret",
                client=client,
            )
            assert await embedder.embed("four") == [4.0, 4.0, 4.0]
        assert requests[0][2]["authorization"] == "Bearer secret"

    async def test_empty_batch(self):
        embedder = OpenAICompatibleEmbedder(
            base_url="http://embed.local", model="m", vector_dim=3
        )
        assert await embedder.embed_batch([]) == []

    async def test_length_mismatch_fails(self):
        requests = []
        transport = embeddings_transport(requests, drop_last=True)
        async with httpx.AsyncClient(transport=transport) as client:
            embedder = OpenAICompatibleEmbedder(
                base_url="http://embed.local", model="m", vector_dim=3, client=client
            )
            with pytest.raises(EmbeddingError):
                await embedder.embed_batch(["a", "b"])

    async def test_http_error(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(500, text="model not loaded")
        )
        async with httpx.AsyncClient(transport=transport) as client:
            embedder = OpenAICompatibleEmbedder(
                base_url="http://embed.local", model="m", vector_dim=3, client=client
            )
            with pytest.raises(EmbeddingError, match="500"):
                await embedder.embed("x")


def test_get_embedder_ollama():
    embedder = get_embedder(AppConfig())
    assert isinstance(embedder, OpenAICompatibleEmbedder)
    assert embedder.model == "qwen3-embedding:4b"
    assert embedder.vector_dim == 2560


def test_get_embedder_uses_model_base_url():
    config = AppConfig(
        embeddings={
            "model": {
                "provider": "vllm",
                "name": "bge",
                "vector_dim": 1024,
                "base_url": "http://gpu:9000/v1",
            }
        }
    )
    embedder = get_embedder(config)
    assert embedder.base_url == "http://gpu:9000"


def test_get_embedder_unknown_provider():
    config = AppConfig(embeddings={"model": {"provider": "nope"}})
    with pytest.raises(ValueError):
        get_embedder(config)
