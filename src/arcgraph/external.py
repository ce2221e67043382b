"""Adapters for the combinatorial solvers the engine delegates to.

Two collaborators are consumed through small protocols so that any
implementation can be plugged in:

- ``MatchingSolver``: minimum-cost perfect matching on an undirected graph
- ``ArborescenceSolver``: minimum spanning arborescence from a fixed root

Default implementations are backed by networkx, which is an optional
dependency.

Example:
    >>> from arcgraph import Graph, GraphKind, min_cost_matching
    >>> g = Graph(GraphKind.UNDIRECTED, n=4)
    >>> for u, v, c in [(1, 2, 1), (3, 4, 1), (1, 3, 5), (2, 4, 5)]:
    ...     _ = g.add_link(u, v, c)
    >>> sorted(min_cost_matching(g))
    [(1, 2), (3, 4)]
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Protocol

import numpy as np

from .data import GraphKind, Link
from .exceptions import InfeasibleProblemError, InvalidGraphError
from .graph import Graph

logger = logging.getLogger(__name__)

# Check for optional dependencies
try:
    import networkx as nx  # type: ignore[import-untyped,unused-ignore]

    _HAS_NETWORKX = True
except ImportError:
    _HAS_NETWORKX = False


def _check_dependencies() -> None:
    """Check if the networkx-backed solvers can be used."""
    if not _HAS_NETWORKX:
        msg = (
            "The default external solvers require networkx. "
            "Install with: pip install 'arcgraph[external]'"
        )
        raise ImportError(msg)


class MatchingSolver(Protocol):
    def match(self, n: int, edges: Sequence[tuple[int, int, int]]) -> list[tuple[int, int]]:
        """Return a minimum-cost perfect matching.

        Args:
            n: Number of vertices, indexed 0..n-1.
            edges: (u, v, cost) triples.

        Returns:
            Disjoint (u, v) index pairs.
        """
        ...


class ArborescenceSolver(Protocol):
    def predecessors(self, weights: np.ndarray, root_index: int) -> list[int]:
        """Return the predecessor index of every vertex in a minimum spanning arborescence.

        Args:
            weights: n x n matrix; weights[i, j] is the cost of arc i -> j and
                     inf where there is no arc.
            root_index: Index of the root; the root's entry in the result is -1.
        """
        ...


class NetworkXMatchingSolver:
    """Perfect matching through networkx.min_weight_matching (blossom algorithm)."""

    def match(self, n: int, edges: Sequence[tuple[int, int, int]]) -> list[tuple[int, int]]:
        _check_dependencies()
        G = nx.Graph()
        G.add_nodes_from(range(n))
        for u, v, cost in edges:
            if u == v:
                continue
            if G.has_edge(u, v) and G[u][v]["weight"] <= cost:
                continue
            G.add_edge(u, v, weight=cost)
        return [(u, v) for u, v in nx.min_weight_matching(G, weight="weight")]


class NetworkXArborescenceSolver:
    """Minimum spanning arborescence through networkx (Edmonds' algorithm).

    Arcs into the root are dropped before solving, which forces the root.
    """

    def predecessors(self, weights: np.ndarray, root_index: int) -> list[int]:
        _check_dependencies()
        n = weights.shape[0]
        G = nx.DiGraph()
        G.add_nodes_from(range(n))
        for i, j in zip(*np.nonzero(np.isfinite(weights))):
            if i != j and j != root_index:
                G.add_edge(int(i), int(j), weight=float(weights[i, j]))
        try:
            arborescence = nx.minimum_spanning_arborescence(G, attr="weight")
        except nx.NetworkXException as exc:
            raise InfeasibleProblemError(
                f"No spanning arborescence rooted at index {root_index} exists"
            ) from exc

        preds = [-1] * n
        for tail, head in arborescence.edges():
            preds[head] = tail
        return preds


def min_cost_matching(graph: Graph, solver: MatchingSolver | None = None) -> set[tuple[int, int]]:
    """Compute a minimum-cost perfect matching of an undirected graph.

    Args:
        graph: Undirected graph; typically a complete graph on odd-degree
               vertices weighted with shortest path distances.
        solver: Matching backend. Defaults to NetworkXMatchingSolver.

    Returns:
        Vertex id pairs (u, v) with u < v, covering every vertex exactly once.

    Raises:
        InvalidGraphError: If graph is not undirected.
        InfeasibleProblemError: If the solver's matching is not perfect.
    """
    if graph.kind is not GraphKind.UNDIRECTED:
        raise InvalidGraphError(f"Matching requires an undirected graph, got {graph.kind.value}")
    solver = solver if solver is not None else NetworkXMatchingSolver()
    n = graph.num_vertices
    edges = [(link.tail.id - 1, link.head.id - 1, link.cost) for link in graph.links]
    pairs = solver.match(n, edges)

    matching = {(min(u, v) + 1, max(u, v) + 1) for u, v in pairs}
    covered = [vertex for pair in matching for vertex in pair]
    if len(covered) != n or len(set(covered)) != n:
        logger.error(
            "Matching solver did not return a perfect matching",
            extra={"vertices": n, "covered": len(set(covered))},
        )
        raise InfeasibleProblemError(
            f"No perfect matching found: {len(set(covered))} of {n} vertices covered"
        )
    return matching


def min_spanning_arborescence(
    graph: Graph, root: int, solver: ArborescenceSolver | None = None
) -> set[int]:
    """Compute a minimum spanning arborescence of a directed graph.

    The solver works on a weight matrix indexed 0..n-1 in which the root and
    vertex n trade places, so the root always sits at the last index. Each
    predecessor slot of the answer is translated back into the cheapest arc
    between the two vertices.

    Args:
        graph: Directed graph.
        root: Vertex id the arborescence is rooted at.
        solver: Arborescence backend. Defaults to NetworkXArborescenceSolver.

    Returns:
        Ids of the arcs in the arborescence (n - 1 of them).

    Raises:
        InvalidGraphError: If graph is not directed or root does not exist.
        InfeasibleProblemError: If some vertex cannot be reached from root.
    """
    if graph.kind is not GraphKind.DIRECTED:
        raise InvalidGraphError(
            f"Arborescences are computed on directed graphs, got {graph.kind.value}"
        )
    n = graph.num_vertices
    graph.vertex(root)
    if n == 1:
        return set()
    solver = solver if solver is not None else NetworkXArborescenceSolver()

    def index_of(vertex_id: int) -> int:
        if vertex_id == root:
            return n - 1
        if vertex_id == n:
            return root - 1
        return vertex_id - 1

    def vertex_at(index: int) -> int:
        if index == n - 1:
            return root
        if index == root - 1:
            return n
        return index + 1

    weights = np.full((n, n), np.inf)
    for link in graph.links:
        i, j = index_of(link.tail.id), index_of(link.head.id)
        if i != j and link.cost < weights[i, j]:
            weights[i, j] = link.cost

    preds = solver.predecessors(weights, n - 1)
    arborescence: set[int] = set()
    for index, pred in enumerate(preds):
        if index == n - 1:
            continue
        if pred < 0 or math.isinf(weights[pred, index]):
            logger.error(
                "Arborescence solver returned an invalid predecessor",
                extra={"index": index, "predecessor": pred},
            )
            raise InfeasibleProblemError(
                f"Vertex {vertex_at(index)} is not reachable from root {root}"
            )
        tail, head = vertex_at(pred), vertex_at(index)
        arborescence.add(_cheapest_arc(graph, tail, head).id)
    return arborescence


def _cheapest_arc(graph: Graph, tail: int, head: int) -> Link:
    candidates = [link for link in graph.find_links(tail, head) if link.tail.id == tail]
    return min(candidates, key=lambda link: (link.cost, link.id))
