"""
Initial placement using networkx community detection.

Uses networkx for:
- Graph representation of the connectivity
- Community detection (greedy modularity) to cluster connected nodes

The seed layout is then built by shelf packing:
- inside a cluster, nodes are packed by descending size
- clusters are ordered so strongly inter-connected ones are adjacent, then
  packed as blocks
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence, Tuple

import networkx as nx
from networkx.algorithms import community

from .config import LayoutConfig
from .models import Edge, Node

logger = logging.getLogger(__name__)

# Clusters are packed into rows roughly this much wider than tall
SHELF_ASPECT = 1.5


class PlacementStrategy(Protocol):
    """Produces seed positions for every node."""

    def place(
        self, nodes: List[Node], edges: Sequence[Edge], config: LayoutConfig
    ) -> None:
        ...


@dataclass
class _Block:
    """A rectangle to be shelf-packed; ``key`` identifies what it stands for."""

    key: int
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0


class ClusterShelfPlacement:
    """
    Clustering-seeded placement.

    Nodes sharing many edges end up in the same cluster and are packed close
    together; clusters with many edges between them are packed next to each
    other. Always assigns a position to every node.
    """

    def place(
        self, nodes: List[Node], edges: Sequence[Edge], config: LayoutConfig
    ) -> None:
        if not nodes:
            return

        clusters = cluster_nodes(len(nodes), edges)
        spacing = config.min_spacing

        # Pack each cluster on its own, positions relative to the cluster
        blocks: List[_Block] = []
        local_positions: Dict[int, Tuple[float, float]] = {}
        for cluster_idx, members in enumerate(clusters):
            items = [
                _Block(key=i, width=nodes[i].width, height=nodes[i].height)
                for i in sorted(
                    members,
                    key=lambda i: (-nodes[i].height, -nodes[i].width, i),
                )
            ]
            width, height = shelf_pack(items, spacing)
            for item in items:
                local_positions[item.key] = (item.x, item.y)
            blocks.append(_Block(key=cluster_idx, width=width, height=height))

        ordered = order_clusters(clusters, edges)
        cluster_blocks = [blocks[idx] for idx in ordered]
        shelf_pack(cluster_blocks, 2 * spacing)

        for block in cluster_blocks:
            for i in clusters[block.key]:
                local_x, local_y = local_positions[i]
                nodes[i].x = block.x + local_x
                nodes[i].y = block.y + local_y

        logger.debug(
            "Initial placement: %d nodes in %d clusters", len(nodes), len(clusters)
        )


def cluster_nodes(node_count: int, edges: Sequence[Edge]) -> List[List[int]]:
    """
    Group node indices into clusters by connectivity.

    Args:
        node_count: Number of nodes in the graph.
        edges: Edges of the graph; parallel edges strengthen a connection.

    Returns:
        Clusters as sorted index lists, largest first, ties by lowest index.
    """
    graph = nx.Graph()
    graph.add_nodes_from(range(node_count))
    for edge in edges:
        if edge.source == edge.target:
            continue
        if graph.has_edge(edge.source, edge.target):
            graph[edge.source][edge.target]["weight"] += 1
        else:
            graph.add_edge(edge.source, edge.target, weight=1)

    if graph.number_of_edges() == 0:
        return [[i] for i in range(node_count)]

    communities = community.greedy_modularity_communities(graph, weight="weight")
    clusters = [sorted(members) for members in communities]
    clusters.sort(key=lambda members: (-len(members), members[0]))
    return clusters


def order_clusters(clusters: List[List[int]], edges: Sequence[Edge]) -> List[int]:
    """
    Order clusters so that each one follows the clusters it is most tied to.

    Starts with the first (largest) cluster and repeatedly appends the
    remaining cluster with the most edges into the already ordered ones.
    """
    if not clusters:
        return []

    membership = {}
    for cluster_idx, members in enumerate(clusters):
        for i in members:
            membership[i] = cluster_idx

    links: Dict[int, Dict[int, int]] = defaultdict(lambda: defaultdict(int))
    for edge in edges:
        a = membership.get(edge.source)
        b = membership.get(edge.target)
        if a is None or b is None or a == b:
            continue
        links[a][b] += 1
        links[b][a] += 1

    ordered = [0]
    remaining = set(range(1, len(clusters)))
    while remaining:
        best = max(
            remaining,
            key=lambda c: (
                sum(links[c][o] for o in ordered),
                len(clusters[c]),
                -c,
            ),
        )
        ordered.append(best)
        remaining.remove(best)
    return ordered


def shelf_pack(items: List[_Block], spacing: float) -> Tuple[float, float]:
    """
    Pack rectangles into shelves, in the given order.

    Each shelf is as tall as its tallest item; a new shelf starts when the
    next item would exceed the target width. The target width keeps the
    packed area at roughly ``SHELF_ASPECT`` times wider than tall, but is never
    narrower than the widest item.

    Args:
        items: Blocks to pack; their x/y are set in place.
        spacing: Gap between neighbouring blocks and between shelves.

    Returns:
        (width, height) of the packed area.
    """
    if not items:
        return 0.0, 0.0

    area = sum((item.width + spacing) * (item.height + spacing) for item in items)
    target_width = max(
        math.sqrt(area * SHELF_ASPECT),
        max(item.width for item in items),
    )

    x = 0.0
    y = 0.0
    shelf_height = 0.0
    used_width = 0.0
    for item in items:
        if x > 0 and x + item.width > target_width:
            y += shelf_height + spacing
            x = 0.0
            shelf_height = 0.0
        item.x = x
        item.y = y
        x += item.width + spacing
        shelf_height = max(shelf_height, item.height)
        used_width = max(used_width, item.x + item.width)

    return used_width, y + shelf_height
