from orchard.raptor.models import TreeNode
from orchard.utils import cosine_similarity


def cluster_nodes(
    nodes: list[TreeNode],
    cluster_size: int,
    similarity_threshold: float,
) -> list[list[TreeNode]]:
    """Group nodes greedily by similarity to a seed node.

    Each unvisited node, in input order, seeds a new cluster. Later unvisited
    nodes whose cosine similarity to the seed reaches the threshold join it
    until the cluster holds cluster_size members. The result depends only on
    input order, so the same ordered input always clusters the same way.

    Args:
        nodes: Nodes to cluster, in a stable order
        cluster_size: Maximum members per cluster
        similarity_threshold: Minimum similarity to the seed to join its cluster

    Returns:
        Clusters in seed order. Inputs no larger than cluster_size come back
        as a single cluster.
    """
    if len(nodes) <= cluster_size:
        return [list(nodes)] if nodes else []

    visited = [False] * len(nodes)
    clusters: list[list[TreeNode]] = []

    for i, seed in enumerate(nodes):
        if visited[i]:
            continue
        visited[i] = True
        cluster = [seed]
        seed_embedding = seed.embedding or []

        for j in range(i + 1, len(nodes)):
            if len(cluster) >= cluster_size:
                break
            if visited[j]:
                continue
            candidate = nodes[j].embedding or []
            if cosine_similarity(seed_embedding, candidate) >= similarity_threshold:
                cluster.append(nodes[j])
                visited[j] = True

        clusters.append(cluster)

    return clusters
