from typing import Protocol, runtime_checkable

from orchard.store.models import Document, SearchResult


@runtime_checkable
class VectorStore(Protocol):
    """Flat document store searchable by embedding similarity."""

    async def add(self, documents: list[Document]) -> None: ...

    async def search(
        self, embedding: list[float], limit: int = 10
    ) -> list[SearchResult]: ...

    async def get(self, document_id: str) -> Document | None: ...

    async def delete(self, document_ids: list[str]) -> None: ...

    async def count(self) -> int: ...

    async def clear(self) -> None: ...
