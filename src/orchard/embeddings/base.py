from typing import Protocol, runtime_checkable


class EmbeddingError(RuntimeError):
    """Raised when an embedding provider fails or returns malformed output."""


@runtime_checkable
class Embedder(Protocol):
    vector_dim: int

    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts, returning one vector per input in the same order."""
        ...
