from typing import Any

from pydantic import BaseModel


class Document(BaseModel):
    """A unit of retrievable content.

    Attributes:
        id: Unique identifier, required for storage
        content: Text content
        embedding: Vector embedding of the content; required for search
        metadata: Arbitrary key/value data carried through search results
    """

    id: str = ""
    content: str = ""
    embedding: list[float] | None = None
    metadata: dict[str, Any] = {}


class SearchResult(BaseModel):
    document: Document
    score: float
