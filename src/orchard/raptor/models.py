from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

from orchard.store.models import Document


@dataclass(eq=False)
class TreeNode:
    """A node in the RAPTOR tree.

    Leaves (level 0) mirror one stored document each. Summary nodes
    (level >= 1) own their children and carry the embedding of their
    generated summary.

    Attributes:
        id: Document id for leaves, ``cluster_l<level>_<index>`` for summaries
        level: Tree level, 0 for leaves
        content: Leaf text
        summary: Generated summary text (summary nodes only)
        embedding: Vector embedding; None only for the synthetic root
        children: Owned child nodes, empty for leaves
        parent: Back-reference used for context lookup; not part of ownership
        document_ids: Ids of every document under this node, in first-seen order
        metadata: Document metadata for leaves, level info for summaries
    """

    id: str
    level: int = 0
    content: str = ""
    summary: str = ""
    embedding: list[float] | None = None
    children: list["TreeNode"] = field(default_factory=list)
    parent: Optional["TreeNode"] = field(default=None, repr=False)
    document_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        return self.level == 0

    @property
    def text(self) -> str:
        """Summary for summary nodes, raw content for leaves."""
        return self.summary or self.content

    @classmethod
    def from_document(cls, document: Document) -> "TreeNode":
        return cls(
            id=document.id,
            level=0,
            content=document.content,
            embedding=document.embedding,
            document_ids=[document.id],
            metadata=dict(document.metadata),
        )

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            content=self.content,
            embedding=self.embedding,
            metadata=self.metadata,
        )


@dataclass
class RaptorTree:
    root: TreeNode | None = None
    levels: dict[int, list[TreeNode]] = field(default_factory=dict)

    @property
    def leaves(self) -> list[TreeNode]:
        return self.levels.get(0, [])

    @property
    def top_level(self) -> int:
        """Highest populated level, or -1 for an empty tree."""
        populated = [level for level, nodes in self.levels.items() if nodes]
        return max(populated, default=-1)

    def iter_nodes(self) -> Iterator[TreeNode]:
        for level in sorted(self.levels):
            yield from self.levels[level]

    def node_count(self) -> int:
        return sum(len(nodes) for nodes in self.levels.values())

    def find_node(self, node_id: str) -> TreeNode | None:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None
