"""Eulerian predicates and Euler tour construction (Hierholzer trail splicing)."""

from __future__ import annotations

import logging

from .connectivity import is_strongly_connected
from .data import GraphKind
from .exceptions import InvalidGraphError
from .graph import Graph

logger = logging.getLogger(__name__)


def is_eulerian(graph: Graph) -> bool:
    """Check the degree conditions for an Euler tour.

    Directed graphs must be balanced (in-degree equals out-degree everywhere),
    undirected and windy graphs must have even degree everywhere, and mixed
    graphs must be strongly Eulerian. Connectivity is not checked here.
    """
    if graph.kind is GraphKind.MIXED:
        return is_strongly_eulerian(graph)
    if graph.kind is GraphKind.DIRECTED:
        return all(vertex.in_degree == vertex.out_degree for vertex in graph.vertices)
    return all(vertex.degree % 2 == 0 for vertex in graph.vertices)


def is_strongly_eulerian(graph: Graph) -> bool:
    """Check that every vertex is both even and balanced, with no detached vertex.

    Even means an even number of incident undirected links; balanced means
    in-degree equals out-degree. This is sufficient but not necessary for a
    mixed graph to be Eulerian, and it is the notion the mixed-graph tour
    construction relies on.
    """
    for vertex in graph.vertices:
        if vertex.degree % 2 == 1 or vertex.delta != 0:
            return False
        if vertex.degree == 0 and vertex.in_degree == 0:
            logger.warning(
                "Vertex is detached from the rest of the graph",
                extra={"vertex": vertex.id},
            )
            return False
    return True


def direct_undirected_cycles(graph: Graph) -> Graph:
    """Orient the undirected links of a strongly Eulerian mixed graph.

    Arcs are copied across unchanged. The undirected links are then consumed
    as a sequence of closed walks: starting from the lowest vertex with unused
    undirected links, unused links are followed greedily until the walk
    returns to its start, and every link of the walk becomes an arc oriented
    along the walk. Because every vertex has even undirected degree each walk
    closes, and the result is balanced at every vertex.

    Every arc of the returned directed graph carries the id of the mixed link
    it was made from as its match id. The result shares the identity context
    and depot of ``graph``.

    Raises:
        InvalidGraphError: If graph is not a strongly Eulerian mixed graph.
    """
    if graph.kind is not GraphKind.MIXED or not is_strongly_eulerian(graph):
        logger.error(
            "Cannot orient undirected cycles of a graph that is not strongly Eulerian and mixed",
            extra={"kind": graph.kind.value},
        )
        raise InvalidGraphError(
            "direct_undirected_cycles requires a strongly Eulerian mixed graph"
        )

    directed = Graph(
        GraphKind.DIRECTED,
        n=graph.num_vertices,
        context=graph.context,
        depot_id=graph.depot_id,
    )
    incident: list[list[tuple[int, int]]] = [[] for _ in range(graph.num_vertices + 1)]
    for link in graph.links:
        tail, head = link.endpoint_ids
        if link.directed:
            _copy_oriented(directed, graph, link.id, tail, head)
            continue
        incident[tail].append((link.id, head))
        if tail != head:
            incident[head].append((link.id, tail))

    used = [False] * (graph.num_links + 1)
    cursor = [0] * (graph.num_vertices + 1)
    for start in range(1, graph.num_vertices + 1):
        while _next_unused(incident, cursor, used, start) is not None:
            current = start
            while True:
                step = _next_unused(incident, cursor, used, current)
                if step is None:
                    raise InvalidGraphError(
                        f"Undirected walk from vertex {start} got stuck at vertex {current}"
                    )
                link_id, other = step
                used[link_id] = True
                _copy_oriented(directed, graph, link_id, current, other)
                current = other
                if current == start:
                    break
    return directed


def euler_tour(graph: Graph) -> list[int]:
    """Construct a closed walk from the depot that traverses every link exactly once.

    Hierholzer's construction: walk unused links greedily from the current
    start until the walk returns to it, splice that sub-circuit into the trail
    at the first occurrence of its start vertex, then restart from the first
    vertex on the trail that still has unused links. Mixed graphs are first
    reduced to a directed graph with ``direct_undirected_cycles`` and the
    reduction is re-checked for strong connectivity.

    Args:
        graph: An Eulerian graph. ``graph.depot_id`` is where the tour starts
               and ends.

    Returns:
        Link ids of ``graph`` in traversal order. An empty graph yields [].

    Raises:
        InvalidGraphError: If the graph is not Eulerian, the mixed reduction is
            not strongly connected, or some links are unreachable from the depot.

    Time Complexity:
        O(n + m) link traversals, plus trail splicing

    Examples:
        >>> g = Graph(GraphKind.UNDIRECTED, n=3)
        >>> for u, v in [(1, 2), (2, 3), (3, 1)]:
        ...     _ = g.add_link(u, v, cost=1)
        >>> euler_tour(g)
        [1, 2, 3]
    """
    if not is_eulerian(graph):
        logger.error(
            "Attempted to build an Euler tour on a non-Eulerian graph",
            extra={"kind": graph.kind.value, "links": graph.num_links},
        )
        raise InvalidGraphError("Cannot build an Euler tour: the graph is not Eulerian")
    if graph.num_links == 0:
        logger.debug("Euler tour requested on a graph without links")
        return []

    if graph.kind is GraphKind.MIXED:
        directed = direct_undirected_cycles(graph)
        if not is_strongly_connected(directed):
            logger.error(
                "Directed reduction of the mixed graph is not strongly connected",
                extra={"vertices": directed.num_vertices, "links": directed.num_links},
            )
            raise InvalidGraphError(
                "Cannot build an Euler tour: orienting the undirected cycles "
                "did not yield a strongly connected graph"
            )
        return [directed.link(link_id).match_id for link_id in _hierholzer(directed)]
    return _hierholzer(graph)


def _hierholzer(graph: Graph) -> list[int]:
    depot = graph.vertex(graph.depot_id).id
    incident: list[list[tuple[int, int]]] = [[] for _ in range(graph.num_vertices + 1)]
    for link in graph.links:
        tail, head = link.endpoint_ids
        incident[tail].append((link.id, head))
        if not link.directed and tail != head:
            incident[head].append((link.id, tail))

    used = [False] * (graph.num_links + 1)
    cursor = [0] * (graph.num_vertices + 1)
    trail_vertices = [depot]
    trail_links: list[int] = []
    index = 0
    while True:
        start = trail_vertices[index]
        cycle_vertices = [start]
        cycle_links: list[int] = []
        current = start
        while True:
            step = _next_unused(incident, cursor, used, current)
            if step is None:
                if current == start:
                    break
                raise InvalidGraphError(
                    f"Euler walk from vertex {start} got stuck at vertex {current}"
                )
            link_id, current = step
            used[link_id] = True
            cycle_links.append(link_id)
            cycle_vertices.append(current)
            if current == start:
                break

        # The trail holds no earlier occurrence of start, so splice at index.
        trail_vertices[index : index + 1] = cycle_vertices
        trail_links[index:index] = cycle_links

        while index < len(trail_vertices) and (
            _next_unused(incident, cursor, used, trail_vertices[index]) is None
        ):
            index += 1
        if index == len(trail_vertices):
            break

    if len(trail_links) != graph.num_links:
        logger.error(
            "Euler tour does not reach every link",
            extra={"depot": depot, "covered": len(trail_links), "links": graph.num_links},
        )
        raise InvalidGraphError(
            f"Only {len(trail_links)} of {graph.num_links} links are reachable from depot {depot}"
        )
    return trail_links


def _next_unused(
    incident: list[list[tuple[int, int]]], cursor: list[int], used: list[bool], vertex: int
) -> tuple[int, int] | None:
    links = incident[vertex]
    position = cursor[vertex]
    while position < len(links) and used[links[position][0]]:
        position += 1
    cursor[vertex] = position
    return links[position] if position < len(links) else None


def _copy_oriented(directed: Graph, source: Graph, link_id: int, tail: int, head: int) -> None:
    link = source.link(link_id)
    directed.add_link(
        tail,
        head,
        link.cost,
        directed=True,
        required=link.required,
        capacity=link.capacity,
        match_id=link.id,
        label=link.label,
    )
