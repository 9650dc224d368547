from orchard.store.models import Document, SearchResult
from orchard.utils import cosine_similarity

DEFAULT_LIMIT = 10


class MemoryVectorStore:
    """In-process vector store using a linear cosine similarity scan."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    async def add(self, documents: list[Document]) -> None:
        for document in documents:
            if not document.id:
                raise ValueError("Document id is required")
        for document in documents:
            self._documents[document.id] = document

    async def search(
        self, embedding: list[float], limit: int = DEFAULT_LIMIT
    ) -> list[SearchResult]:
        if limit <= 0:
            limit = DEFAULT_LIMIT

        results = [
            SearchResult(
                document=document,
                score=cosine_similarity(embedding, document.embedding),
            )
            for document in self._documents.values()
            if document.embedding is not None
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    async def get(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    async def delete(self, document_ids: list[str]) -> None:
        for document_id in document_ids:
            self._documents.pop(document_id, None)

    async def count(self) -> int:
        return len(self._documents)

    async def clear(self) -> None:
        self._documents.clear()

    async def list_ids(self) -> list[str]:
        return list(self._documents)
