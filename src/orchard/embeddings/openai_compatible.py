import logging

import httpx

from orchard.embeddings.base import EmbeddingError

logger = logging.getLogger(__name__)


class OpenAICompatibleEmbedder:
    """Embedder for servers exposing the OpenAI `POST /v1/embeddings` API.

    Works with Ollama, vLLM, LM Studio and OpenAI itself.
    """

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        vector_dim: int,
        api_key: str | None = None,
        timeout: int = 60,
        batch_size: int = 64,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        # Accept base_url with or without a trailing /v1.
        cleaned = base_url.rstrip("/")
        if cleaned.endswith("/v1"):
            cleaned = cleaned[: -len("/v1")]
        self.base_url = cleaned
        self.model = model
        self.vector_dim = vector_dim
        self.api_key = api_key
        self.timeout = timeout
        self.batch_size = max(1, batch_size)
        self._client = client

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            vectors.extend(await self._post(batch))

        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Embedding count mismatch: expected {len(texts)}, got {len(vectors)}"
            )
        return vectors

    async def _post(self, inputs: list[str]) -> list[list[float]]:
        payload = {"model": self.model, "input": inputs, "encoding_format": "float"}
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.base_url}/v1/embeddings"
        try:
            if self._client is not None:
                resp = await self._client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(
                f"Embedding request failed with {e.response.status_code}: "
                f"{e.response.text[:500]}"
            ) from e
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        data = resp.json().get("data")
        if not isinstance(data, list) or len(data) != len(inputs):
            raise EmbeddingError(
                f"Embedding response has {len(data) if isinstance(data, list) else 0} "
                f"items for {len(inputs)} inputs"
            )

        ordered = sorted(data, key=lambda item: item.get("index", 0))
        vectors = [item["embedding"] for item in ordered]
        for vector in vectors:
            if len(vector) != self.vector_dim:
                logger.warning(
                    f"Embedding dimension {len(vector)} does not match "
                    f"configured vector_dim {self.vector_dim}"
                )
                break
        return vectors
