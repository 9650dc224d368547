import logging

from orchard.config import RaptorConfig
from orchard.embeddings.base import Embedder
from orchard.raptor.clustering import cluster_nodes
from orchard.raptor.models import RaptorTree, TreeNode
from orchard.raptor.summarizer import Summarizer, fallback_summary

logger = logging.getLogger(__name__)

ROOT_ID = "root"
ROOT_SUMMARY = "Root node"


class RaptorTreeBuilder:
    """Builds the RAPTOR hierarchical summary tree over a set of leaves."""

    def __init__(
        self,
        embedder: Embedder,
        summarizer: Summarizer,
        config: RaptorConfig | None = None,
    ):
        self._embedder = embedder
        self._summarizer = summarizer
        self._config = config or RaptorConfig()

    async def build(self, leaves: list[TreeNode]) -> RaptorTree:
        """Build every summary level above the given leaves.

        Each round clusters the current level, summarizes each cluster,
        embeds the summary and creates one parent per cluster. Rounds stop
        at max_levels, when a single node remains, or when clustering no
        longer merges anything.

        Returns:
            A tree whose level 0 is exactly the given leaves
        """
        for leaf in leaves:
            leaf.parent = None

        tree = RaptorTree(levels={0: list(leaves)})
        current = list(leaves)
        level = 0

        while level < self._config.max_levels and len(current) > 1:
            logger.debug(f"Building level {level + 1} from {len(current)} nodes")

            clusters = cluster_nodes(
                current,
                self._config.effective_cluster_size,
                self._config.similarity_threshold,
            )
            if len(clusters) == len(current):
                logger.debug(f"No clusters merged at level {level + 1}")
                break

            parents: list[TreeNode] = []
            for index, cluster in enumerate(clusters):
                if not cluster:
                    continue
                parent = await self._create_parent(cluster, level + 1, index)
                if parent is not None:
                    parents.append(parent)

            if not parents:
                logger.warning(f"Every cluster at level {level + 1} was dropped")
                break

            level += 1
            tree.levels[level] = parents
            current = parents
            logger.debug(f"Created {len(parents)} nodes at level {level}")

        if len(current) == 1:
            tree.root = current[0]
        elif current:
            document_ids: list[str] = []
            for node in current:
                document_ids.extend(node.document_ids)
            tree.root = TreeNode(
                id=ROOT_ID,
                level=tree.top_level + 1,
                summary=ROOT_SUMMARY,
                children=current,
                document_ids=list(dict.fromkeys(document_ids)),
            )

        logger.debug(f"RAPTOR tree built with {tree.node_count()} nodes")
        return tree

    async def _create_parent(
        self, cluster: list[TreeNode], level: int, index: int
    ) -> TreeNode | None:
        texts = [node.text for node in cluster]

        try:
            summary = await self._summarizer.summarize(texts)
        except Exception as e:
            logger.warning(f"Summarization failed for cluster {index}: {e}")
            summary = fallback_summary(texts, self._config.fallback_summary_chars)

        try:
            embedding = await self._embedder.embed(summary)
        except Exception as e:
            logger.warning(
                f"Dropping cluster {index} at level {level}, embedding failed: {e}"
            )
            return None

        document_ids: list[str] = []
        for node in cluster:
            document_ids.extend(node.document_ids)

        parent = TreeNode(
            id=f"cluster_l{level}_{index}",
            level=level,
            summary=summary,
            embedding=embedding,
            children=list(cluster),
            document_ids=list(dict.fromkeys(document_ids)),
            metadata={"level": level, "child_count": len(cluster)},
        )
        for child in cluster:
            child.parent = parent
        return parent
