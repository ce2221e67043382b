"""Connected and strongly connected components.

The two low-level routines operate on flattened edge lists over vertices
1..n so they can be reused on projections and scratch graphs; the graph-level
helpers below them flatten a Graph and answer the usual connectivity questions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .data import Components, GraphKind
from .exceptions import InvalidGraphError
from .graph import Graph

logger = logging.getLogger(__name__)


def connected_components(n: int, edges: Iterable[tuple[int, int]]) -> Components:
    """Compute the connected components of an undirected graph on vertices 1..n.

    Components are merged along the edge list with union by size; a vertex's
    component index is assigned in order of the smallest vertex id it contains.
    With no edges, every vertex is its own component.

    Args:
        n: Number of vertices.
        edges: (u, v) endpoint pairs; orientation is ignored.

    Returns:
        Components with count and component[v] in 1..count (slot 0 unused).

    Raises:
        InvalidGraphError: If an endpoint lies outside 1..n.

    Time Complexity:
        O(n + m α(n))
    """
    edge_list = _checked(n, edges)
    if not edge_list:
        return Components(count=n, component=[0, *range(1, n + 1)])

    root = list(range(n + 1))
    size = [1] * (n + 1)

    def find(vertex: int) -> int:
        top = vertex
        while root[top] != top:
            top = root[top]
        while root[vertex] != top:
            root[vertex], vertex = top, root[vertex]
        return top

    for u, v in edge_list:
        key_u, key_v = find(u), find(v)
        if key_u == key_v:
            continue
        if size[key_u] < size[key_v]:
            key_u, key_v = key_v, key_u
        root[key_v] = key_u
        size[key_u] += size[key_v]

    component = [0] * (n + 1)
    label_of_root: dict[int, int] = {}
    for vertex in range(1, n + 1):
        key = find(vertex)
        if key not in label_of_root:
            label_of_root[key] = len(label_of_root) + 1
        component[vertex] = label_of_root[key]
    return Components(count=len(label_of_root), component=component)


def strongly_connected_components(n: int, arcs: Iterable[tuple[int, int]]) -> Components:
    """Compute the strongly connected components of a directed graph on vertices 1..n.

    Iterative depth-first search over a forward-star representation. Each vertex
    receives a discovery number ("sequence") and tracks the lowest discovery
    number reachable through vertices still on the stack ("backedge"); a
    component is closed when a vertex's backedge equals its own sequence.
    Arcs are consumed through a per-vertex cursor, so self-loops and repeated
    (tail, head) pairs are each processed exactly once.

    Args:
        n: Number of vertices.
        arcs: (tail, head) pairs.

    Returns:
        Components, numbered in the order they are closed.

    Raises:
        InvalidGraphError: If an endpoint lies outside 1..n.

    Time Complexity:
        O(n + m)
    """
    heads: list[list[int]] = [[] for _ in range(n + 1)]
    for tail, head in _checked(n, arcs):
        heads[tail].append(head)

    cursor = [0] * (n + 1)
    sequence = [0] * (n + 1)
    backedge = [0] * (n + 1)
    parent = [0] * (n + 1)
    on_stack = [False] * (n + 1)
    component = [0] * (n + 1)
    stack: list[int] = []
    series = 0
    count = 0

    for start in range(1, n + 1):
        if sequence[start]:
            continue
        series += 1
        sequence[start] = backedge[start] = series
        stack.append(start)
        on_stack[start] = True
        p = start
        while True:
            if cursor[p] < len(heads[p]):
                q = heads[p][cursor[p]]
                cursor[p] += 1
                if not sequence[q]:
                    series += 1
                    sequence[q] = backedge[q] = series
                    parent[q] = p
                    stack.append(q)
                    on_stack[q] = True
                    p = q
                elif on_stack[q] and sequence[q] < sequence[p]:
                    backedge[p] = min(backedge[p], sequence[q])
                continue

            if backedge[p] == sequence[p]:
                count += 1
                while True:
                    r = stack.pop()
                    on_stack[r] = False
                    component[r] = count
                    if r == p:
                        break
            if parent[p]:
                backedge[parent[p]] = min(backedge[parent[p]], backedge[p])
                p = parent[p]
            else:
                break

    return Components(count=count, component=component)


def graph_components(graph: Graph) -> Components:
    """Connected components of a graph, treating every link as undirected."""
    pairs = [link.endpoint_ids for link in graph.links]
    return connected_components(graph.num_vertices, pairs)


def graph_strong_components(graph: Graph) -> Components:
    """Strongly connected components; undirected links count as two opposite arcs."""
    return strongly_connected_components(graph.num_vertices, _arc_pairs(graph))


def is_connected(graph: Graph) -> bool:
    """Return True if the graph is connected (empty and single-vertex graphs are)."""
    if graph.num_vertices <= 1:
        return True
    return graph_components(graph).count == 1


def is_strongly_connected(graph: Graph) -> bool:
    """Return True if every vertex can reach every other vertex."""
    if graph.num_vertices <= 1:
        return True
    components = graph_strong_components(graph)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Computed strongly connected components",
            extra={"kind": graph.kind.value, "components": components.count},
        )
    return components.count == 1


def _arc_pairs(graph: Graph) -> list[tuple[int, int]]:
    pairs: list[tuple[int, int]] = []
    for link in graph.links:
        tail, head = link.endpoint_ids
        pairs.append((tail, head))
        if not link.directed and graph.kind is not GraphKind.DIRECTED:
            pairs.append((head, tail))
    return pairs


def _checked(n: int, pairs: Iterable[tuple[int, int]]) -> Sequence[tuple[int, int]]:
    checked = list(pairs)
    for u, v in checked:
        if not (1 <= u <= n and 1 <= v <= n):
            logger.error(
                "Edge endpoint outside vertex range",
                extra={"edge": (u, v), "vertices": n},
            )
            raise InvalidGraphError(
                f"Edge ({u}, {v}) references a vertex outside 1..{n}"
            )
    return checked
