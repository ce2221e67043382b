"""Minimum spanning tree of an undirected or windy graph."""

from __future__ import annotations

import heapq
import logging

from .data import GraphKind
from .exceptions import InvalidGraphError
from .graph import Graph

logger = logging.getLogger(__name__)


def min_spanning_tree(graph: Graph) -> set[int]:
    """Return the link ids of a minimum spanning tree, grown with Prim's algorithm.

    Windy links are weighed by their cheaper traversal direction. Ties between
    equal-cost links are broken by link id. Self-loops are never selected.

    Raises:
        InvalidGraphError: If graph is directed or mixed, or is not connected.

    Time Complexity:
        O(m log m)
    """
    if graph.kind not in (GraphKind.UNDIRECTED, GraphKind.WINDY):
        raise InvalidGraphError(
            f"Spanning trees are computed on undirected or windy graphs, got {graph.kind.value}"
        )
    n = graph.num_vertices
    if n <= 1:
        return set()

    in_tree = [False] * (n + 1)
    tree: set[int] = set()
    heap: list[tuple[int, int, int]] = []

    def grow(vertex_id: int) -> None:
        in_tree[vertex_id] = True
        for other_id, links in graph.vertex(vertex_id).neighbors.items():
            if in_tree[other_id]:
                continue
            for link in links:
                weight = min(link.cost_from(vertex_id), link.cost_from(other_id))
                heapq.heappush(heap, (weight, link.id, other_id))

    grow(1)
    while heap and len(tree) < n - 1:
        _, link_id, vertex_id = heapq.heappop(heap)
        if in_tree[vertex_id]:
            continue
        tree.add(link_id)
        grow(vertex_id)

    if len(tree) < n - 1:
        logger.error(
            "Graph is not connected; no spanning tree exists",
            extra={"vertices": n, "tree_links": len(tree)},
        )
        raise InvalidGraphError("Cannot build a spanning tree of a disconnected graph")
    return tree
