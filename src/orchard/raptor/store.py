import logging

from orchard.config import AppConfig, Config, RaptorConfig
from orchard.embeddings.base import Embedder
from orchard.raptor.builder import RaptorTreeBuilder
from orchard.raptor.models import RaptorTree, TreeNode
from orchard.raptor.summarizer import SimpleSummarizer, Summarizer
from orchard.store.base import VectorStore
from orchard.store.models import Document, SearchResult
from orchard.utils import ReadWriteLock, cosine_similarity

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
CONTEXT_SUFFIX = "_context"


class RaptorStore:
    """Document store with a RAPTOR summary tree for hierarchical search.

    Documents are written through to a flat base store and mirrored as leaf
    nodes. Every add rebuilds the summary levels from the full leaf set.
    Reads share a lock; add, delete and clear are exclusive, and the tree
    build runs inside the add's exclusive section.
    """

    def __init__(
        self,
        base: VectorStore,
        embedder: Embedder,
        summarizer: Summarizer | None = None,
        config: RaptorConfig | None = None,
    ):
        self._base = base
        self._embedder = embedder
        self._config = config or RaptorConfig()
        self._builder = RaptorTreeBuilder(
            embedder, summarizer or SimpleSummarizer(), self._config
        )
        self._tree = RaptorTree()
        self._lock = ReadWriteLock()

    @classmethod
    def from_config(
        cls,
        base: VectorStore | None = None,
        config: AppConfig | None = None,
    ) -> "RaptorStore":
        """Create a store using the configured embedder and LLM summarizer."""
        from orchard.embeddings import get_embedder
        from orchard.raptor.summarizer import ClusterSummarizer
        from orchard.store.memory import MemoryVectorStore

        config = config or Config.get()
        return cls(
            base or MemoryVectorStore(),
            get_embedder(config),
            ClusterSummarizer(config),
            config.raptor,
        )

    @property
    def config(self) -> RaptorConfig:
        return self._config

    async def add(self, documents: list[Document]) -> None:
        """Store documents and rebuild the tree.

        Raises:
            ValueError: If a document has no id or no embedding. Nothing is
                stored in that case.
        """
        for document in documents:
            if not document.id:
                raise ValueError("Document id is required")
            if document.embedding is None:
                raise ValueError(f"Document {document.id} has no embedding")

        async with self._lock.writing():
            await self._base.add(documents)

            leaves = {leaf.id: leaf for leaf in self._tree.leaves}
            for document in documents:
                leaves[document.id] = TreeNode.from_document(document)

            self._tree = await self._builder.build(list(leaves.values()))
            logger.debug(
                f"Added {len(documents)} documents, tree has "
                f"{len(self._tree.leaves)} leaves"
            )

    async def search(
        self, embedding: list[float], limit: int = DEFAULT_LIMIT
    ) -> list[SearchResult]:
        async with self._lock.reading():
            return self._search(embedding, limit)

    async def search_with_context(
        self, query: str, limit: int = DEFAULT_LIMIT
    ) -> list[SearchResult]:
        """Search by text and add the parent summary of each hit as context.

        Each matched leaf with a parent contributes one extra result holding
        that parent's summary, scored at context_score_factor times the leaf
        score. Hits that share a parent each contribute their own entry.
        """
        if limit <= 0:
            limit = DEFAULT_LIMIT
        embedding = await self._embedder.embed(query)

        async with self._lock.reading():
            results = self._search(embedding, limit * 2)
            if not results:
                return []

            expanded: list[SearchResult] = []
            for result in results:
                expanded.append(result)
                node = self._tree.find_node(result.document.id)
                if node is None or node.parent is None:
                    continue
                parent = node.parent
                expanded.append(
                    SearchResult(
                        document=Document(
                            id=parent.id + CONTEXT_SUFFIX,
                            content=f"[Context] {parent.summary}",
                            metadata={"type": "context", "level": parent.level},
                        ),
                        score=result.score * self._config.context_score_factor,
                    )
                )

        expanded.sort(key=lambda r: r.score, reverse=True)
        return expanded[:limit]

    async def delete(self, document_ids: list[str]) -> None:
        """Remove documents and any tree node with a matching id.

        Summaries above removed leaves are kept as they are.
        """
        ids = set(document_ids)
        async with self._lock.writing():
            await self._base.delete(document_ids)
            for level, nodes in self._tree.levels.items():
                self._tree.levels[level] = [n for n in nodes if n.id not in ids]
            if not self._tree.leaves:
                self._tree = RaptorTree()

    async def get(self, document_id: str) -> Document | None:
        async with self._lock.reading():
            return await self._base.get(document_id)

    async def count(self) -> int:
        async with self._lock.reading():
            return await self._base.count()

    async def clear(self) -> None:
        async with self._lock.writing():
            self._tree = RaptorTree()
            await self._base.clear()

    async def get_tree(self) -> RaptorTree:
        async with self._lock.reading():
            return self._tree

    def _search(self, embedding: list[float], limit: int) -> list[SearchResult]:
        if limit <= 0:
            limit = DEFAULT_LIMIT

        live_leaves = {leaf.id for leaf in self._tree.leaves}
        candidates: list[SearchResult] = []

        for level in sorted(self._tree.levels, reverse=True):
            for node in self._tree.levels[level]:
                score = cosine_similarity(embedding, node.embedding or [])
                if level == 0:
                    candidates.append(
                        SearchResult(document=node.to_document(), score=score)
                    )
                elif score > self._config.similarity_threshold:
                    candidates.extend(self._descend(node, embedding, live_leaves))

        candidates.sort(key=lambda r: r.score, reverse=True)

        seen: set[str] = set()
        unique: list[SearchResult] = []
        for candidate in candidates:
            if candidate.document.id in seen:
                continue
            seen.add(candidate.document.id)
            unique.append(candidate)
            if len(unique) >= limit:
                break
        return unique

    def _descend(
        self, node: TreeNode, embedding: list[float], live_leaves: set[str]
    ) -> list[SearchResult]:
        results: list[SearchResult] = []
        for child in node.children:
            score = cosine_similarity(embedding, child.embedding or [])
            if child.is_leaf:
                # Stale summaries may still point at deleted leaves.
                if child.id in live_leaves:
                    results.append(
                        SearchResult(document=child.to_document(), score=score)
                    )
            elif child.children and score > self._config.similarity_threshold:
                results.extend(self._descend(child, embedding, live_leaves))
        return results
