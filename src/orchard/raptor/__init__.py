from orchard.raptor.builder import RaptorTreeBuilder
from orchard.raptor.clustering import cluster_nodes
from orchard.raptor.models import RaptorTree, TreeNode
from orchard.raptor.store import RaptorStore
from orchard.raptor.summarizer import ClusterSummarizer, SimpleSummarizer, Summarizer

__all__ = [
    "ClusterSummarizer",
    "RaptorStore",
    "RaptorTree",
    "RaptorTreeBuilder",
    "SimpleSummarizer",
    "Summarizer",
    "TreeNode",
    "cluster_nodes",
]
