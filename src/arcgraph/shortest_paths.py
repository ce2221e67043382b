"""Single-source shortest paths over the directed projection of a graph.

Every graph kind is reduced to a list of ``ProjectedArc`` records before an
algorithm runs: arcs pass through unchanged, while each edge or windy edge
contributes one arc per traversal direction (forward cost, reverse cost). A
projected arc remembers the id of the link it came from, so predecessor links
reported by every algorithm here are ids of the caller's graph.

Two low-level cores work on plain adjacency lists of ``(head, cost, key)``
triples and are shared with the min-cost flow engine:

- ``_dijkstra_core``: binary-heap Dijkstra for non-negative costs
- ``_label_correcting_core``: queue-based label correcting for arbitrary costs,
  with FIFO (Bellman-Ford), Pape, and shortest-label-first disciplines and
  negative-cycle extraction
"""

from __future__ import annotations

import heapq
import logging
import math
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .data import HopLimitedWidthResult, ShortestPathResult
from .exceptions import InvalidGraphError, NegativeCycleError
from .graph import Graph

logger = logging.getLogger(__name__)

# Queue disciplines understood by _label_correcting_core.
FIFO = "fifo"
PAPE = "pape"
SLF = "slf"

DISCIPLINE_BY_ALGORITHM = {"bellman_ford": FIFO, "pape": PAPE, "slf": SLF}

Adjacency = list[list[tuple[int, int, int]]]


@dataclass
class ProjectedArc:
    tail: int
    head: int
    cost: int
    link_id: int


@dataclass
class _Labels:
    dist: list[float]
    path: list[int]
    edge: list[int]
    edge_cost: list[int]


def directed_projection(graph: Graph) -> list[ProjectedArc]:
    """Project a graph onto arcs, one per link and traversal direction.

    Arcs keep their orientation. Edges and windy edges yield a forward arc at
    ``cost`` and a reverse arc at the cost of traversing from the head.
    """
    arcs: list[ProjectedArc] = []
    for link in graph.links:
        tail, head = link.endpoint_ids
        arcs.append(ProjectedArc(tail, head, link.cost, link.id))
        if not link.directed:
            arcs.append(ProjectedArc(head, tail, link.cost_from(head), link.id))
    return arcs


def cheapest_arcs(arcs: Sequence[ProjectedArc]) -> dict[tuple[int, int], ProjectedArc]:
    """Collapse parallel arcs to the cheapest one per (tail, head) pair.

    Ties keep the arc that appears first.
    """
    best: dict[tuple[int, int], ProjectedArc] = {}
    for arc in arcs:
        key = (arc.tail, arc.head)
        current = best.get(key)
        if current is None or arc.cost < current.cost:
            best[key] = arc
    return best


def build_adjacency(n: int, arcs: Sequence[ProjectedArc]) -> Adjacency:
    adjacency: Adjacency = [[] for _ in range(n + 1)]
    for arc in arcs:
        adjacency[arc.tail].append((arc.head, arc.cost, arc.link_id))
    return adjacency


def dijkstra(graph: Graph, source: int) -> ShortestPathResult:
    """Compute shortest paths from source with Dijkstra's algorithm.

    Parallel links are collapsed to the cheapest one before the search.
    Vertices that cannot be reached keep an infinite distance and are never
    used for relaxation.

    Args:
        graph: Graph of any kind; every traversal cost must be non-negative.
        source: Source vertex id.

    Returns:
        ShortestPathResult with distances, predecessor vertices and the ids of
        the links entering each vertex.

    Raises:
        InvalidGraphError: If source is out of range or any cost is negative.

    Time Complexity:
        O((n + m) log n)

    Examples:
        >>> g = Graph(GraphKind.DIRECTED, n=3)
        >>> _ = g.add_link(1, 2, 4); _ = g.add_link(2, 3, 1); _ = g.add_link(1, 3, 7)
        >>> dijkstra(g, 1).dist[3]
        5
    """
    n = _check_source(graph, source)
    arcs = list(cheapest_arcs(directed_projection(graph)).values())
    negative = next((arc for arc in arcs if arc.cost < 0), None)
    if negative is not None:
        logger.error(
            "Dijkstra called on a graph with negative costs",
            extra={"link_id": negative.link_id, "cost": negative.cost},
        )
        raise InvalidGraphError(
            f"Dijkstra's algorithm requires non-negative costs; link {negative.link_id} "
            f"costs {negative.cost} from vertex {negative.tail}"
        )
    labels = _dijkstra_core(n, build_adjacency(n, arcs), source)
    return ShortestPathResult(source, labels.dist, labels.path, labels.edge)


def bellman_ford(graph: Graph, source: int) -> ShortestPathResult:
    """Label-correcting shortest paths with a FIFO queue (Bellman-Ford-Moore).

    Raises:
        InvalidGraphError: If source is out of range.
        NegativeCycleError: If a negative cycle is reachable from source.
    """
    return _label_correcting(graph, source, FIFO)


def pape(graph: Graph, source: int) -> ShortestPathResult:
    """Label-correcting shortest paths with Pape's deque discipline.

    A vertex whose label improves is inserted at the front of the queue if it
    has been scanned before and at the back otherwise.

    Raises:
        InvalidGraphError: If source is out of range.
        NegativeCycleError: If a negative cycle is reachable from source.
    """
    return _label_correcting(graph, source, PAPE)


def slf(graph: Graph, source: int) -> ShortestPathResult:
    """Label-correcting shortest paths with the shortest-label-first discipline.

    A vertex whose label improves is inserted at the front of the queue if its
    distance does not exceed the distance of the current front, else at the back.

    Raises:
        InvalidGraphError: If source is out of range.
        NegativeCycleError: If a negative cycle is reachable from source.
    """
    return _label_correcting(graph, source, SLF)


def shortest_paths(graph: Graph, source: int, algorithm: str = "dijkstra") -> ShortestPathResult:
    """Dispatch to a single-source algorithm by name.

    Args:
        algorithm: "dijkstra", "bellman_ford", "pape" or "slf".
    """
    if algorithm == "dijkstra":
        return dijkstra(graph, source)
    if algorithm not in DISCIPLINE_BY_ALGORITHM:
        raise InvalidGraphError(f"Unknown shortest path algorithm '{algorithm}'")
    return _label_correcting(graph, source, DISCIPLINE_BY_ALGORITHM[algorithm])


def widest_paths(graph: Graph, source: int) -> ShortestPathResult:
    """Compute maximum-bottleneck paths from source.

    The width of a path is the smallest link cost along it; each vertex is
    labelled with the largest width over all paths from source. Parallel links
    are collapsed to the widest one. The source has infinite width and
    unreachable vertices keep a width of -inf.

    Returns:
        ShortestPathResult whose ``dist`` holds widths.
    """
    n = _check_source(graph, source)
    adjacency = build_adjacency(n, _widest_arcs(graph))

    width: list[float] = [-math.inf] * (n + 1)
    path = [0] * (n + 1)
    edge = [0] * (n + 1)
    done = [False] * (n + 1)
    width[source] = math.inf
    heap: list[tuple[float, int]] = [(-math.inf, source)]
    while heap:
        _, u = heapq.heappop(heap)
        if done[u]:
            continue
        done[u] = True
        for v, cost, link_id in adjacency[u]:
            if done[v]:
                continue
            alt = min(width[u], cost)
            if alt > width[v]:
                width[v] = alt
                path[v] = u
                edge[v] = link_id
                heapq.heappush(heap, (-alt, v))
    return ShortestPathResult(source, width, path, edge)


def hop_limited_widest_paths(graph: Graph, source: int, max_links: int) -> HopLimitedWidthResult:
    """Compute maximum-bottleneck paths that use at most ``max_links`` links.

    Round i relaxes every widest projected arc against the labels of round
    i - 1, so row i of the result describes walks of at most i links. Rounds
    stop early once a round changes nothing; later rows repeat the last one.

    Args:
        graph: Graph of any kind.
        source: Source vertex id.
        max_links: Largest number of links a path may use (0 or more).

    Returns:
        HopLimitedWidthResult with one row of labels per hop limit 0..max_links.

    Raises:
        InvalidGraphError: If source does not exist or max_links is negative.

    Time Complexity:
        O(max_links * m)

    Examples:
        >>> g = Graph(GraphKind.DIRECTED, n=3)
        >>> _ = g.add_link(1, 2, 10); _ = g.add_link(2, 3, 10); _ = g.add_link(1, 3, 2)
        >>> result = hop_limited_widest_paths(g, 1, max_links=2)
        >>> float(result.width[1, 3]), float(result.width[2, 3])
        (2.0, 10.0)
    """
    n = _check_source(graph, source)
    if max_links < 0:
        raise InvalidGraphError(f"max_links must be non-negative, got {max_links}")
    arcs = _widest_arcs(graph)

    rows = max_links + 1
    width = np.full((rows, n + 1), -np.inf)
    path = np.zeros((rows, n + 1), dtype=np.int64)
    edge = np.zeros((rows, n + 1), dtype=np.int64)
    hops = np.zeros((rows, n + 1), dtype=np.int64)
    width[:, source] = np.inf

    for i in range(1, rows):
        previous = width[i - 1]
        width[i] = previous
        path[i] = path[i - 1]
        edge[i] = edge[i - 1]
        hops[i] = hops[i - 1]
        changed = False
        for arc in arcs:
            alt = min(previous[arc.tail], arc.cost)
            if alt > width[i, arc.head]:
                width[i, arc.head] = alt
                path[i, arc.head] = arc.tail
                edge[i, arc.head] = arc.link_id
                hops[i, arc.head] = i
                changed = True
        if not changed:
            width[i + 1 :] = width[i]
            path[i + 1 :] = path[i]
            edge[i + 1 :] = edge[i]
            hops[i + 1 :] = hops[i]
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Hop-limited widths settled early",
                    extra={"source": source, "rounds": i, "max_links": max_links},
                )
            break
    return HopLimitedWidthResult(source, width, path, edge, hops)


def _widest_arcs(graph: Graph) -> list[ProjectedArc]:
    widest: dict[tuple[int, int], ProjectedArc] = {}
    for arc in directed_projection(graph):
        key = (arc.tail, arc.head)
        if key not in widest or arc.cost > widest[key].cost:
            widest[key] = arc
    return list(widest.values())


def _label_correcting(graph: Graph, source: int, discipline: str) -> ShortestPathResult:
    n = _check_source(graph, source)
    adjacency = build_adjacency(n, directed_projection(graph))
    labels = _label_correcting_core(n, adjacency, source, discipline)
    return ShortestPathResult(source, labels.dist, labels.path, labels.edge)


def _check_source(graph: Graph, source: int) -> int:
    n = graph.num_vertices
    if not 1 <= source <= n:
        logger.error("Source vertex out of range", extra={"source": source, "vertices": n})
        raise InvalidGraphError(f"Source vertex {source} does not exist (graph has {n} vertices)")
    return n


def _dijkstra_core(n: int, adjacency: Adjacency, source: int) -> _Labels:
    """Heap-based Dijkstra over adjacency triples with non-negative costs."""
    dist: list[float] = [math.inf] * (n + 1)
    path = [0] * (n + 1)
    edge = [0] * (n + 1)
    edge_cost = [0] * (n + 1)
    done = [False] * (n + 1)
    dist[source] = 0
    heap: list[tuple[float, int]] = [(0, source)]
    while heap:
        d, u = heapq.heappop(heap)
        if done[u]:
            continue
        done[u] = True
        for v, cost, key in adjacency[u]:
            if done[v]:
                continue
            alt = d + cost
            if alt < dist[v]:
                dist[v] = alt
                path[v] = u
                edge[v] = key
                edge_cost[v] = cost
                heapq.heappush(heap, (alt, v))
    return _Labels(dist, path, edge, edge_cost)


def _label_correcting_core(
    n: int, adjacency: Adjacency, source: int, discipline: str = SLF
) -> _Labels:
    """Generic label-correcting search over adjacency triples.

    Vertex scans are counted; once the count exceeds n * m the predecessor graph
    is searched for a cycle, which is necessarily negative. If none exists yet
    the scan count starts over.

    Raises:
        NegativeCycleError: With the cycle in traversal order, reported through
            the adjacency keys.
    """
    m = sum(len(out) for out in adjacency)
    limit = n * max(m, 1)
    dist: list[float] = [math.inf] * (n + 1)
    path = [0] * (n + 1)
    edge = [0] * (n + 1)
    edge_cost = [0] * (n + 1)
    labels = _Labels(dist, path, edge, edge_cost)
    queued = [False] * (n + 1)
    scanned = [False] * (n + 1)
    dist[source] = 0
    queue: deque[int] = deque([source])
    queued[source] = True
    scans = 0

    while queue:
        u = queue.popleft()
        queued[u] = False
        scanned[u] = True
        for v, cost, key in adjacency[u]:
            alt = dist[u] + cost
            if alt >= dist[v]:
                continue
            dist[v] = alt
            path[v] = u
            edge[v] = key
            edge_cost[v] = cost
            if queued[v]:
                continue
            queued[v] = True
            if discipline == PAPE and scanned[v]:
                queue.appendleft(v)
            elif discipline == SLF and queue and alt <= dist[queue[0]]:
                queue.appendleft(v)
            else:
                queue.append(v)

        scans += 1
        if scans > limit:
            _raise_if_predecessor_cycle(n, adjacency, labels)
            scans = 0

    return labels


def _raise_if_predecessor_cycle(n: int, adjacency: Adjacency, labels: _Labels) -> None:
    # Heads of negative arcs first: every cycle in the predecessor graph is
    # negative and therefore enters at least one of them.
    candidates = [v for out in adjacency for v, cost, _ in out if cost < 0]
    candidates.extend(range(1, n + 1))
    finished = [False] * (n + 1)
    for start in candidates:
        if finished[start]:
            continue
        position: dict[int, int] = {}
        walk: list[int] = []
        current = start
        while current and not finished[current] and current not in position:
            position[current] = len(walk)
            walk.append(current)
            current = labels.path[current]
        if current and current in position:
            _raise_negative_cycle(current, labels)
        for vertex in walk:
            finished[vertex] = True


def _trace_cycle(anchor: int, labels: _Labels) -> tuple[list[int], list[int], int]:
    """Follow predecessors from anchor back to itself.

    Returns the closed vertex walk and the adjacency keys in traversal order,
    together with the summed arc cost.
    """
    vertices = [anchor]
    keys: list[int] = []
    cost = 0
    current = anchor
    while True:
        keys.append(labels.edge[current])
        cost += labels.edge_cost[current]
        current = labels.path[current]
        vertices.append(current)
        if current == anchor:
            break
    vertices.reverse()
    keys.reverse()
    return vertices, keys, cost


def _raise_negative_cycle(anchor: int, labels: _Labels) -> None:
    vertices, keys, cost = _trace_cycle(anchor, labels)
    logger.error(
        "Negative cycle detected",
        extra={"vertex": anchor, "cycle": vertices, "link_ids": keys, "cost": cost},
    )
    raise NegativeCycleError(
        f"Graph contains a negative cycle through vertex {anchor} (cost {cost})",
        vertex=anchor,
        vertices=vertices,
        link_ids=keys,
        cost=cost,
    )
