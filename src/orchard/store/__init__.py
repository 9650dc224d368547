from orchard.store.base import VectorStore
from orchard.store.memory import MemoryVectorStore
from orchard.store.models import Document, SearchResult

__all__ = ["Document", "MemoryVectorStore", "SearchResult", "VectorStore"]
